"""Database infrastructure - declarative base, engines and session scopes."""

from infrastructure.database.engines import (
    build_async_url,
    create_read_engine,
    create_session_factory,
    create_write_engine,
)
from infrastructure.database.models import Base, TimestampMixin
from infrastructure.database.sessions import (
    close_database_connections,
    read_session,
    write_session,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "build_async_url",
    "close_database_connections",
    "create_read_engine",
    "create_session_factory",
    "create_write_engine",
    "read_session",
    "write_session",
]
