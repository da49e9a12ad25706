"""PostgreSQL implementation of IUserRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from membership.domain.aggregates import User
from membership.domain.value_objects import UserId
from membership.infrastructure.models import UserModel
from membership.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from membership.ports.repositories import IUserRepository


class UserRepository(IUserRepository):
    """PostgreSQL-backed repository for User aggregates.

    Stores the username and the two-factor requirement derived from the
    user's groups.
    """

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession owned by the caller
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one.

        Args:
            user: The User aggregate to persist
        """
        stmt = select(UserModel).where(UserModel.id == user.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model:
            model.username = user.username
            model.require_two_factor_authentication_from_group = (
                user.require_two_factor_authentication_from_group
            )
            model.two_factor_grace_period = user.two_factor_grace_period
        else:
            model = UserModel(
                id=user.id.value,
                username=user.username,
                require_two_factor_authentication_from_group=(
                    user.require_two_factor_authentication_from_group
                ),
                two_factor_grace_period=user.two_factor_grace_period,
            )
            self._session.add(model)

        await self._session.flush()
        self._probe.user_saved(user.id.value, user.username)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(UserModel.id == user_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(user_id.value)
            return None

        self._probe.user_retrieved(user_id.value)
        return self._to_domain(model)

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by their username.

        Args:
            username: The username to search for

        Returns:
            The User aggregate, or None if not found
        """
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.username_not_found(username)
            return None

        self._probe.user_retrieved(model.id)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: UserModel) -> User:
        return User(
            id=UserId(value=model.id),
            username=model.username,
            require_two_factor_authentication_from_group=(
                model.require_two_factor_authentication_from_group
            ),
            two_factor_grace_period=model.two_factor_grace_period,
        )
