"""Unit test fixtures with mocked dependencies."""

import pytest

from membership.domain.aggregates import Group, Project
from membership.domain.value_objects import GroupId, UserId


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password="testpass",
    )


@pytest.fixture
def membership_settings():
    """Provide membership settings with full default branch protection."""
    from infrastructure.settings import MembershipSettings

    return MembershipSettings(
        lfs_enabled=True,
        default_branch_protection=2,
        base_url="http://localhost",
        asset_host=None,
        two_factor_grace_period_default=48,
        two_factor_cascade_max_attempts=3,
    )


@pytest.fixture
def owner_id() -> UserId:
    return UserId.generate()


@pytest.fixture
def root_group() -> Group:
    """A top-level group with no members."""
    return Group(id=GroupId.generate(), name="Root", path="root")


@pytest.fixture
def subgroup(root_group: Group) -> Group:
    """A group nested under root_group."""
    return Group(
        id=GroupId.generate(), name="Sub", path="sub", parent_id=root_group.id
    )


@pytest.fixture
def project(subgroup: Group) -> Project:
    """A project with commits, owned by subgroup."""
    project = Project.create(name="app", group_id=subgroup.id)
    project.empty_repo = False
    return project


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    from unittest.mock import AsyncMock, MagicMock

    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    session.add = MagicMock()
    return session
