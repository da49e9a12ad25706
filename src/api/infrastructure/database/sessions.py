"""Process-wide engines and session scopes.

Engines are created lazily on first use and shared by every caller. A
session scope yields an AsyncSession that is not auto-committing: services
manage transactions with ``async with session.begin()``.
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import (
    create_read_engine,
    create_session_factory,
    create_write_engine,
)
from infrastructure.observability import DefaultDatabaseProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultDatabaseProbe()

_write_engine: AsyncEngine | None = None
_read_engine: AsyncEngine | None = None
_write_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_read_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_write_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker bound to the write engine (singleton).

    Uses double-check locking for thread-safe initialization. The engine is
    created together with its sessionmaker.
    """
    global _write_engine, _write_sessionmaker
    if _write_sessionmaker is None:
        with _engine_lock:
            if _write_sessionmaker is None:
                settings = get_database_settings()
                _write_engine = create_write_engine(settings)
                _write_sessionmaker = create_session_factory(_write_engine)
                _probe.engine_created("write", settings.host, settings.database)
    return _write_sessionmaker


def get_read_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker bound to the snapshot-reading engine (singleton)."""
    global _read_engine, _read_sessionmaker
    if _read_sessionmaker is None:
        with _engine_lock:
            if _read_sessionmaker is None:
                settings = get_database_settings()
                _read_engine = create_read_engine(settings)
                _read_sessionmaker = create_session_factory(_read_engine)
                _probe.engine_created("read", settings.host, settings.database)
    return _read_sessionmaker


def get_write_engine() -> AsyncEngine:
    """Get the write database engine (singleton)."""
    return get_write_sessionmaker().kw["bind"]


def get_read_engine() -> AsyncEngine:
    """Get the snapshot-reading engine (singleton)."""
    return get_read_sessionmaker().kw["bind"]


@asynccontextmanager
async def write_session() -> AsyncIterator[AsyncSession]:
    """Open a session for mutations.

    Usage:
        async with write_session() as session:
            service = get_group_service(session)
            await service.add_user(...)
    """
    sessionmaker = get_write_sessionmaker()
    async with sessionmaker() as session:
        try:
            yield session
        except Exception as e:
            _probe.session_rolled_back("write", e)
            raise


@asynccontextmanager
async def read_session() -> AsyncIterator[AsyncSession]:
    """Open a session whose transactions read one consistent snapshot.

    Resolver queries issued inside one ``session.begin()`` block all see
    the database as of the first statement.
    """
    sessionmaker = get_read_sessionmaker()
    async with sessionmaker() as session:
        try:
            yield session
        except Exception as e:
            _probe.session_rolled_back("read", e)
            raise


async def close_database_connections() -> None:
    """Dispose both engines; they are recreated on next use."""
    global _write_engine, _read_engine, _write_sessionmaker, _read_sessionmaker

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed("write")
        _write_engine = None
        _write_sessionmaker = None

    if _read_engine is not None:
        await _read_engine.dispose()
        _probe.pool_closed("read")
        _read_engine = None
        _read_sessionmaker = None
