"""Repository protocols (ports) for the hooks bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from hooks.domain.aggregates import ProjectHook
from hooks.domain.value_objects import ProjectHookId
from membership.domain.value_objects import ProjectId


@runtime_checkable
class IProjectHookRepository(Protocol):
    """Repository for ProjectHook aggregate persistence."""

    async def save(self, hook: ProjectHook) -> None:
        """Persist a hook, creating or updating it."""
        ...

    async def get_by_id(self, hook_id: ProjectHookId) -> ProjectHook | None:
        """Retrieve a hook by its ID, or None if not found."""
        ...

    async def list_for_project(self, project_id: ProjectId) -> list[ProjectHook]:
        """All hooks of a project, oldest first."""
        ...

    async def delete(self, hook: ProjectHook) -> bool:
        """Delete a hook.

        Returns:
            True if deleted, False if not found
        """
        ...
