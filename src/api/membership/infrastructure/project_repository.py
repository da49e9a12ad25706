"""PostgreSQL implementation of IProjectRepository.

Projects are stored with their protected branch and tag rules, which is
all the membership context needs to decide whether a ref is protected.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from membership.domain.aggregates import Project
from membership.domain.value_objects import GroupId, ProjectId
from membership.infrastructure.models import (
    ProjectModel,
    ProtectedBranchModel,
    ProtectedTagModel,
)
from membership.infrastructure.observability import (
    DefaultProjectRepositoryProbe,
    ProjectRepositoryProbe,
)
from membership.ports.repositories import IProjectRepository


class ProjectRepository(IProjectRepository):
    """PostgreSQL-backed repository for Project aggregates."""

    def __init__(
        self, session: AsyncSession, probe: ProjectRepositoryProbe | None = None
    ) -> None:
        self._session = session
        self._probe = probe or DefaultProjectRepositoryProbe()

    async def save(self, project: Project) -> None:
        """Persist a project with its protection rules.

        Args:
            project: The Project aggregate to persist
        """
        stmt = select(ProjectModel).where(ProjectModel.id == project.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = ProjectModel(id=project.id.value)
            self._session.add(model)

        model.name = project.name
        model.group_id = project.group_id.value
        model.default_branch = project.default_branch
        model.empty_repo = project.empty_repo
        await self._session.flush()

        await self._sync_rules(
            ProtectedBranchModel, project.id.value, project.protected_branches
        )
        await self._sync_rules(
            ProtectedTagModel, project.id.value, project.protected_tags
        )
        await self._session.flush()

        self._probe.project_saved(project.id.value, project.group_id.value)

    async def get_by_id(self, project_id: ProjectId) -> Project | None:
        """Retrieve a project by its ID.

        Args:
            project_id: The unique identifier of the project

        Returns:
            The Project aggregate with protection rules, or None if not found
        """
        stmt = select(ProjectModel).where(ProjectModel.id == project_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.project_not_found(project_id.value)
            return None

        branches = await self._session.execute(
            select(ProtectedBranchModel.name)
            .where(ProtectedBranchModel.project_id == model.id)
            .order_by(ProtectedBranchModel.name)
        )
        tags = await self._session.execute(
            select(ProtectedTagModel.name)
            .where(ProtectedTagModel.project_id == model.id)
            .order_by(ProtectedTagModel.name)
        )

        self._probe.project_retrieved(project_id.value)
        return Project(
            id=ProjectId(value=model.id),
            name=model.name,
            group_id=GroupId(value=model.group_id),
            default_branch=model.default_branch,
            empty_repo=model.empty_repo,
            protected_branches=list(branches.scalars().all()),
            protected_tags=list(tags.scalars().all()),
        )

    async def _sync_rules(
        self,
        model_class: type[ProtectedBranchModel] | type[ProtectedTagModel],
        project_id: str,
        names: list[str],
    ) -> None:
        """Make the rule rows of one kind match the given names."""
        result = await self._session.execute(
            select(model_class).where(model_class.project_id == project_id)
        )
        current = {row.name: row for row in result.scalars().all()}

        for name, row in current.items():
            if name not in names:
                await self._session.delete(row)

        for name in names:
            if name not in current:
                self._session.add(model_class(project_id=project_id, name=name))
