"""Factories wiring the membership services to a session.

Every object built from one session shares it, so a service transaction
covers the repository and resolver reads made on its behalf.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.settings import MembershipSettings, get_membership_settings
from membership.application.services import (
    GroupService,
    MembershipResolver,
    TwoFactorService,
)
from membership.infrastructure.group_repository import GroupRepository
from membership.infrastructure.project_repository import ProjectRepository
from membership.infrastructure.user_repository import UserRepository


def get_group_repository(session: AsyncSession) -> GroupRepository:
    """Get GroupRepository instance bound to the session."""
    return GroupRepository(session=session)


def get_user_repository(session: AsyncSession) -> UserRepository:
    """Get UserRepository instance bound to the session."""
    return UserRepository(session=session)


def get_project_repository(session: AsyncSession) -> ProjectRepository:
    """Get ProjectRepository instance bound to the session."""
    return ProjectRepository(session=session)


def get_membership_resolver(
    session: AsyncSession, settings: MembershipSettings | None = None
) -> MembershipResolver:
    """Get MembershipResolver instance.

    Args:
        session: Async database session; a read session gives every call
            a consistent snapshot
        settings: Membership settings (defaults to the cached settings)
    """
    return MembershipResolver(
        group_repository=get_group_repository(session),
        settings=settings or get_membership_settings(),
    )


def get_two_factor_service(
    session: AsyncSession, settings: MembershipSettings | None = None
) -> TwoFactorService:
    """Get TwoFactorService instance."""
    return TwoFactorService(
        session=session,
        user_repository=get_user_repository(session),
        group_repository=get_group_repository(session),
        settings=settings or get_membership_settings(),
    )


def get_group_service(
    session: AsyncSession, settings: MembershipSettings | None = None
) -> GroupService:
    """Get GroupService instance with the two-factor cascade enabled.

    Args:
        session: Async write session
        settings: Membership settings (defaults to the cached settings)
    """
    settings = settings or get_membership_settings()
    group_repository = get_group_repository(session)
    return GroupService(
        session=session,
        group_repository=group_repository,
        user_repository=get_user_repository(session),
        resolver=MembershipResolver(
            group_repository=group_repository, settings=settings
        ),
        settings=settings,
        two_factor_service=get_two_factor_service(session, settings),
    )
