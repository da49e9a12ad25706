"""Domain probe for membership repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to group, user, and project repository
operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class GroupRepositoryProbe(Protocol):
    """Domain probe for group repository operations."""

    def group_saved(self, group_id: str, member_count: int) -> None:
        """Record that a group was successfully saved."""
        ...

    def group_retrieved(self, group_id: str, member_count: int) -> None:
        """Record that a group was retrieved with members hydrated."""
        ...

    def group_not_found(self, group_id: str) -> None:
        """Record that a group was not found."""
        ...

    def ancestors_retrieved(self, group_id: str, depth: int) -> None:
        """Record that an ancestor chain was loaded."""
        ...

    def group_deleted(self, group_id: str) -> None:
        """Record that a group was deleted."""
        ...

    def duplicate_group_path(self, path: str, parent_id: str | None) -> None:
        """Record that a duplicate sibling path was detected."""
        ...

    def duplicate_group_name(self, name: str, parent_id: str | None) -> None:
        """Record that a duplicate sibling name was detected."""
        ...

    def with_context(self, context: ObservationContext) -> GroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_saved(self, user_id: str, username: str) -> None:
        """Record that a user was successfully saved."""
        ...

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        ...

    def username_not_found(self, username: str) -> None:
        """Record that a username was not found."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class ProjectRepositoryProbe(Protocol):
    """Domain probe for project repository operations."""

    def project_saved(self, project_id: str, group_id: str) -> None:
        """Record that a project was successfully saved."""
        ...

    def project_retrieved(self, project_id: str) -> None:
        """Record that a project was retrieved."""
        ...

    def project_not_found(self, project_id: str) -> None:
        """Record that a project was not found."""
        ...

    def with_context(self, context: ObservationContext) -> ProjectRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGroupRepositoryProbe:
    """Default implementation of GroupRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultGroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupRepositoryProbe(logger=self._logger, context=context)

    def group_saved(self, group_id: str, member_count: int) -> None:
        """Record that a group was successfully saved."""
        self._logger.info(
            "group_saved",
            group_id=group_id,
            member_count=member_count,
            **self._get_context_kwargs(),
        )

    def group_retrieved(self, group_id: str, member_count: int) -> None:
        """Record that a group was retrieved with members hydrated."""
        self._logger.debug(
            "group_retrieved",
            group_id=group_id,
            member_count=member_count,
            **self._get_context_kwargs(),
        )

    def group_not_found(self, group_id: str) -> None:
        """Record that a group was not found."""
        self._logger.debug(
            "group_not_found",
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def ancestors_retrieved(self, group_id: str, depth: int) -> None:
        """Record that an ancestor chain was loaded."""
        self._logger.debug(
            "group_ancestors_retrieved",
            group_id=group_id,
            depth=depth,
            **self._get_context_kwargs(),
        )

    def group_deleted(self, group_id: str) -> None:
        """Record that a group was deleted."""
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def duplicate_group_path(self, path: str, parent_id: str | None) -> None:
        """Record that a duplicate sibling path was detected."""
        self._logger.warning(
            "duplicate_group_path",
            path=path,
            parent_id=parent_id,
            **self._get_context_kwargs(),
        )

    def duplicate_group_name(self, name: str, parent_id: str | None) -> None:
        """Record that a duplicate sibling name was detected."""
        self._logger.warning(
            "duplicate_group_name",
            name=name,
            parent_id=parent_id,
            **self._get_context_kwargs(),
        )


class DefaultUserRepositoryProbe:
    """Default implementation of UserRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultUserRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserRepositoryProbe(logger=self._logger, context=context)

    def user_saved(self, user_id: str, username: str) -> None:
        """Record that a user was successfully saved."""
        self._logger.info(
            "user_saved",
            user_id=user_id,
            username=username,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def username_not_found(self, username: str) -> None:
        """Record that a username was not found."""
        self._logger.debug(
            "username_not_found",
            username=username,
            **self._get_context_kwargs(),
        )


class DefaultProjectRepositoryProbe:
    """Default implementation of ProjectRepositoryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultProjectRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultProjectRepositoryProbe(logger=self._logger, context=context)

    def project_saved(self, project_id: str, group_id: str) -> None:
        self._logger.info(
            "project_saved",
            project_id=project_id,
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def project_retrieved(self, project_id: str) -> None:
        self._logger.debug(
            "project_retrieved",
            project_id=project_id,
            **self._get_context_kwargs(),
        )

    def project_not_found(self, project_id: str) -> None:
        self._logger.debug(
            "project_not_found",
            project_id=project_id,
            **self._get_context_kwargs(),
        )
