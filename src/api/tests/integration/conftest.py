"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. Missing tables
are created from the ORM metadata. Use docker-compose for testing.
"""

from collections.abc import AsyncGenerator
import os

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hooks.infrastructure.models import ProjectHookModel  # noqa: F401
from infrastructure.database.engines import create_write_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings
from membership.infrastructure.group_repository import GroupRepository
from membership.infrastructure.user_repository import UserRepository


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        MEMBERSHIP_DB_HOST, MEMBERSHIP_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("MEMBERSHIP_DB_HOST", "localhost"),
        port=int(os.getenv("MEMBERSHIP_DB_PORT", "5432")),
        database=os.getenv("MEMBERSHIP_DB_DATABASE", "membership"),
        username=os.getenv("MEMBERSHIP_DB_USERNAME", "membership"),
        password=SecretStr(
            os.getenv("MEMBERSHIP_DB_PASSWORD", "membership_dev_password")
        ),
    )


@pytest_asyncio.fixture
async def async_session(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session for integration tests."""
    engine = create_write_engine(integration_db_settings)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    async with sessionmaker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def clean_membership_data(async_session: AsyncSession):
    """Empty the membership tables before and after each test."""
    statement = text(
        "TRUNCATE project_hooks, protected_branches, protected_tags, projects, "
        "group_variables, group_members, groups, users CASCADE"
    )

    async with async_session.begin():
        await async_session.execute(statement)

    yield

    async with async_session.begin():
        await async_session.execute(statement)


@pytest.fixture
def group_repository(async_session: AsyncSession) -> GroupRepository:
    return GroupRepository(session=async_session)


@pytest.fixture
def user_repository(async_session: AsyncSession) -> UserRepository:
    return UserRepository(session=async_session)
