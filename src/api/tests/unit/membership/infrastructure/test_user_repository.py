"""Unit tests for UserRepository."""

from unittest.mock import MagicMock

import pytest

from membership.domain.aggregates import User
from membership.domain.value_objects import UserId
from membership.infrastructure.models import UserModel
from membership.infrastructure.user_repository import UserRepository
from membership.ports.repositories import IUserRepository


@pytest.fixture
def mock_probe():
    return MagicMock()


@pytest.fixture
def repository(mock_session, mock_probe):
    return UserRepository(session=mock_session, probe=mock_probe)


def _result(model):
    result = MagicMock()
    result.scalar_one_or_none.return_value = model
    return result


class TestProtocolCompliance:
    def test_implements_protocol(self, repository):
        assert isinstance(repository, IUserRepository)


class TestSave:
    """Tests for save method."""

    @pytest.mark.asyncio
    async def test_adds_new_user(self, repository, mock_session, mock_probe):
        user = User(id=UserId.generate(), username="alice")
        mock_session.execute.return_value = _result(None)

        await repository.save(user)

        mock_session.add.assert_called_once()
        added = mock_session.add.call_args[0][0]
        assert isinstance(added, UserModel)
        assert added.username == "alice"
        assert added.require_two_factor_authentication_from_group is False
        mock_session.flush.assert_called_once()
        mock_probe.user_saved.assert_called_once_with(user.id.value, "alice")

    @pytest.mark.asyncio
    async def test_updates_two_factor_fields(self, repository, mock_session):
        user = User(
            id=UserId.generate(),
            username="alice",
            require_two_factor_authentication_from_group=True,
            two_factor_grace_period=12,
        )
        existing = UserModel(
            id=user.id.value,
            username="alice",
            require_two_factor_authentication_from_group=False,
            two_factor_grace_period=48,
        )
        mock_session.execute.return_value = _result(existing)

        await repository.save(user)

        mock_session.add.assert_not_called()
        assert existing.require_two_factor_authentication_from_group is True
        assert existing.two_factor_grace_period == 12


class TestGet:
    @pytest.mark.asyncio
    async def test_get_by_id(self, repository, mock_session, mock_probe):
        user_id = UserId.generate()
        mock_session.execute.return_value = _result(
            UserModel(
                id=user_id.value,
                username="bob",
                require_two_factor_authentication_from_group=True,
                two_factor_grace_period=24,
            )
        )

        user = await repository.get_by_id(user_id)

        assert user.id == user_id
        assert user.username == "bob"
        assert user.require_two_factor_authentication_from_group is True
        assert user.two_factor_grace_period == 24
        mock_probe.user_retrieved.assert_called_once_with(user_id.value)

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, repository, mock_session, mock_probe):
        user_id = UserId.generate()
        mock_session.execute.return_value = _result(None)

        assert await repository.get_by_id(user_id) is None
        mock_probe.user_not_found.assert_called_once_with(user_id.value)

    @pytest.mark.asyncio
    async def test_get_by_username_missing(self, repository, mock_session, mock_probe):
        mock_session.execute.return_value = _result(None)

        assert await repository.get_by_username("nobody") is None
        mock_probe.username_not_found.assert_called_once_with("nobody")
