"""Factories wiring the hooks services to a session."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hooks.application.services import ProjectHookService
from hooks.infrastructure.project_hook_repository import ProjectHookRepository
from infrastructure.settings import MembershipSettings
from membership.dependencies import get_membership_resolver, get_project_repository


def get_project_hook_service(
    session: AsyncSession, settings: MembershipSettings | None = None
) -> ProjectHookService:
    """Get ProjectHookService instance.

    Args:
        session: Async write session
        settings: Membership settings for the resolver
    """
    return ProjectHookService(
        session=session,
        hook_repository=ProjectHookRepository(session=session),
        project_repository=get_project_repository(session),
        resolver=get_membership_resolver(session, settings),
    )
