"""Repository protocols (ports) for the membership bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. Implementations return fully hydrated aggregates: groups come
back with their memberships and secret variables loaded.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from membership.domain.aggregates import Group, Project, User
from membership.domain.value_objects import GroupId, ProjectId, UserId, Visibility


@runtime_checkable
class IGroupRepository(Protocol):
    """Repository for Group aggregate persistence.

    Ancestor lookups must return the whole chain from one consistent read so
    that resolution never mixes states across concurrent updates.
    """

    async def save(self, group: Group) -> None:
        """Persist a group with its memberships and variables.

        Creates a new group or updates an existing one.

        Raises:
            DuplicateGroupPathError: If a sibling already uses the path
            DuplicateGroupNameError: If a sibling already uses the name
        """
        ...

    async def get_by_id(self, group_id: GroupId) -> Group | None:
        """Retrieve a group by its ID, or None if not found."""
        ...

    async def get_ancestors(self, group_id: GroupId) -> list[Group]:
        """Retrieve a group and all of its ancestors.

        Args:
            group_id: The group to start from

        Returns:
            The group followed by its ancestors, nearest first; an empty list
            when the group does not exist
        """
        ...

    async def get_by_path(self, path: str, parent_id: GroupId | None) -> Group | None:
        """Retrieve the child of parent_id (or top-level group) with this path."""
        ...

    async def get_by_name(self, name: str, parent_id: GroupId | None) -> Group | None:
        """Retrieve the child of parent_id (or top-level group) with this name."""
        ...

    async def search(self, query: str) -> list[Group]:
        """Groups whose name or path contains query, ignoring case."""
        ...

    async def list_by_visibility(self, levels: list[Visibility]) -> list[Group]:
        """Groups with one of the given visibility levels."""
        ...

    async def list_for_member(self, user_id: UserId) -> list[Group]:
        """Groups where the user holds an active direct membership."""
        ...

    async def list_two_factor_groups_for_user(self, user_id: UserId) -> list[Group]:
        """Groups requiring two-factor among the user's member groups and
        all of their ancestors."""
        ...

    async def list_member_ids_in_subtree(self, group_id: GroupId) -> list[UserId]:
        """Active members of the group and of every group below it."""
        ...

    async def delete(self, group: Group) -> bool:
        """Delete a group; memberships and variables are removed with it.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence."""

    async def save(self, user: User) -> None:
        """Persist a user aggregate."""
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID, or None if not found."""
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Retrieve a user by their username, or None if not found."""
        ...


@runtime_checkable
class IProjectRepository(Protocol):
    """Repository for Project aggregate persistence."""

    async def save(self, project: Project) -> None:
        """Persist a project with its protected branch and tag rules."""
        ...

    async def get_by_id(self, project_id: ProjectId) -> Project | None:
        """Retrieve a project by its ID, or None if not found."""
        ...
