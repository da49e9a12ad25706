"""Project hook application service.

Manages the webhooks of a project. Every operation requires Master access
on the project's group, as decided by the MembershipResolver.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hooks.application.observability import (
    DefaultProjectHookServiceProbe,
    ProjectHookServiceProbe,
)
from hooks.application.value_objects import ProjectHookView
from hooks.domain.aggregates import ProjectHook
from hooks.domain.exceptions import InvalidHookUrlError, MissingHookUrlError
from hooks.domain.value_objects import ProjectHookId
from hooks.ports.exceptions import ProjectHookNotFoundError, ProjectNotFoundError
from hooks.ports.repositories import IProjectHookRepository
from membership.application.services import MembershipResolver
from membership.domain.aggregates import Project
from membership.domain.value_objects import AccessLevel, ProjectId, UserId
from membership.ports.repositories import IProjectRepository


class ProjectHookService:
    """Application service for project webhooks.

    Hooks are only ever returned as ProjectHookView, so the token set on
    creation or update never leaves the service.
    """

    def __init__(
        self,
        session: AsyncSession,
        hook_repository: IProjectHookRepository,
        project_repository: IProjectRepository,
        resolver: MembershipResolver,
        probe: ProjectHookServiceProbe | None = None,
    ):
        """Initialize ProjectHookService with dependencies.

        Args:
            session: Database session for transaction management
            hook_repository: Repository for hook persistence
            project_repository: Repository used to find the project's group
            resolver: The single source of access decisions
            probe: Optional domain probe for observability
        """
        self._session = session
        self._hook_repository = hook_repository
        self._project_repository = project_repository
        self._resolver = resolver
        self._probe = probe or DefaultProjectHookServiceProbe()

    async def list_hooks(
        self, project_id: ProjectId, user_id: UserId
    ) -> list[ProjectHookView]:
        """List a project's hooks.

        Raises:
            ProjectNotFoundError: If the project does not exist
            UnauthorizedError: If the user is not at least Master
        """
        async with self._session.begin():
            await self._authorize(project_id, user_id)
            hooks = await self._hook_repository.list_for_project(project_id)

        return [ProjectHookView.from_hook(hook) for hook in hooks]

    async def get_hook(
        self, project_id: ProjectId, hook_id: ProjectHookId, user_id: UserId
    ) -> ProjectHookView:
        """Get one hook of a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectHookNotFoundError: If the hook does not belong to the project
            UnauthorizedError: If the user is not at least Master
        """
        async with self._session.begin():
            await self._authorize(project_id, user_id)
            hook = await self._find_hook(project_id, hook_id)

        return ProjectHookView.from_hook(hook)

    async def add_hook(
        self,
        project_id: ProjectId,
        user_id: UserId,
        url: str | None,
        token: str | None = None,
        **settings: bool,
    ) -> ProjectHookView:
        """Register a hook on a project.

        Args:
            project_id: The project to add the hook to
            user_id: The acting user
            url: Delivery URL, http or https
            token: Optional secret token; stored, never returned
            **settings: Event flags and enable_ssl_verification

        Raises:
            ProjectNotFoundError: If the project does not exist
            UnauthorizedError: If the user is not at least Master
            MissingHookUrlError: If url is missing
            InvalidHookUrlError: If url is not an http(s) URL
        """
        async with self._session.begin():
            await self._authorize(project_id, user_id)
            try:
                hook = ProjectHook.create(
                    project_id=project_id, url=url, token=token, **settings
                )
            except (MissingHookUrlError, InvalidHookUrlError) as e:
                self._probe.invalid_hook_rejected(project_id.value, str(e))
                raise
            await self._hook_repository.save(hook)

        self._probe.hook_added(project_id.value, hook.id.value, hook.enabled_events())
        return ProjectHookView.from_hook(hook)

    async def update_hook(
        self,
        project_id: ProjectId,
        hook_id: ProjectHookId,
        user_id: UserId,
        url: str | None,
        token: str | None = None,
        **settings: bool,
    ) -> ProjectHookView:
        """Change a hook. The URL must be given again; a missing token is kept.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectHookNotFoundError: If the hook does not belong to the project
            UnauthorizedError: If the user is not at least Master
            MissingHookUrlError: If url is missing
            InvalidHookUrlError: If url is not an http(s) URL
        """
        async with self._session.begin():
            await self._authorize(project_id, user_id)
            hook = await self._find_hook(project_id, hook_id)
            try:
                hook.update(url=url, token=token, **settings)
            except (MissingHookUrlError, InvalidHookUrlError) as e:
                self._probe.invalid_hook_rejected(project_id.value, str(e))
                raise
            await self._hook_repository.save(hook)

        self._probe.hook_updated(project_id.value, hook.id.value, hook.enabled_events())
        return ProjectHookView.from_hook(hook)

    async def delete_hook(
        self, project_id: ProjectId, hook_id: ProjectHookId, user_id: UserId
    ) -> None:
        """Remove a hook from a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectHookNotFoundError: If the hook does not belong to the project
            UnauthorizedError: If the user is not at least Master
        """
        async with self._session.begin():
            await self._authorize(project_id, user_id)
            hook = await self._find_hook(project_id, hook_id)
            await self._hook_repository.delete(hook)

        self._probe.hook_deleted(project_id.value, hook_id.value)

    async def _authorize(self, project_id: ProjectId, user_id: UserId) -> Project:
        project = await self._project_repository.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id.value} not found")

        await self._resolver.require_access(
            project.group_id, user_id, AccessLevel.MASTER
        )
        return project

    async def _find_hook(
        self, project_id: ProjectId, hook_id: ProjectHookId
    ) -> ProjectHook:
        hook = await self._hook_repository.get_by_id(hook_id)
        # A hook of another project is reported exactly like a missing one
        if hook is None or hook.project_id != project_id:
            self._probe.hook_not_found(project_id.value, hook_id.value)
            raise ProjectHookNotFoundError(
                f"Hook {hook_id.value} not found in project {project_id.value}"
            )
        return hook
