"""PostgreSQL implementation of IProjectHookRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hooks.domain.aggregates import ProjectHook
from hooks.domain.aggregates.project_hook import SETTING_FIELDS
from hooks.domain.value_objects import ProjectHookId
from hooks.infrastructure.models import ProjectHookModel
from hooks.infrastructure.observability import (
    DefaultProjectHookRepositoryProbe,
    ProjectHookRepositoryProbe,
)
from hooks.ports.repositories import IProjectHookRepository
from membership.domain.value_objects import ProjectId


class ProjectHookRepository(IProjectHookRepository):
    """PostgreSQL-backed repository for ProjectHook aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: ProjectHookRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession owned by the caller
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultProjectHookRepositoryProbe()

    async def save(self, hook: ProjectHook) -> None:
        """Persist a hook, creating or updating it.

        Args:
            hook: The ProjectHook aggregate to persist
        """
        stmt = select(ProjectHookModel).where(ProjectHookModel.id == hook.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = ProjectHookModel(id=hook.id.value, project_id=hook.project_id.value)
            self._session.add(model)

        model.url = hook.url
        model.token = hook.token
        for name in SETTING_FIELDS:
            setattr(model, name, getattr(hook, name))

        await self._session.flush()
        self._probe.hook_saved(hook.id.value, hook.project_id.value)

    async def get_by_id(self, hook_id: ProjectHookId) -> ProjectHook | None:
        """Retrieve a hook by its ID.

        Returns:
            The ProjectHook aggregate, or None if not found
        """
        stmt = select(ProjectHookModel).where(ProjectHookModel.id == hook_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.hook_not_found(hook_id.value)
            return None

        return self._to_domain(model)

    async def list_for_project(self, project_id: ProjectId) -> list[ProjectHook]:
        """All hooks of a project, oldest first."""
        stmt = (
            select(ProjectHookModel)
            .where(ProjectHookModel.project_id == project_id.value)
            .order_by(ProjectHookModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def delete(self, hook: ProjectHook) -> bool:
        """Delete a hook.

        Returns:
            True if deleted, False if not found
        """
        stmt = select(ProjectHookModel).where(ProjectHookModel.id == hook.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.hook_not_found(hook.id.value)
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.hook_deleted(hook.id.value)
        return True

    @staticmethod
    def _to_domain(model: ProjectHookModel) -> ProjectHook:
        return ProjectHook(
            id=ProjectHookId(value=model.id),
            project_id=ProjectId(value=model.project_id),
            url=model.url,
            token=model.token,
            **{name: getattr(model, name) for name in SETTING_FIELDS},
        )
