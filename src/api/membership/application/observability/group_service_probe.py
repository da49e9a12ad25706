"""Protocol for group application service observability.

Defines the interface for domain probes that capture application-level
domain events for group service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class GroupServiceProbe(Protocol):
    """Domain probe for group application service operations."""

    def group_created(
        self,
        group_id: str,
        path: str,
        parent_id: str | None,
        creator_id: str,
    ) -> None:
        """Record that a group was created."""
        ...

    def group_creation_failed(
        self,
        path: str,
        parent_id: str | None,
        error: str,
    ) -> None:
        """Record that group creation failed."""
        ...

    def group_updated(
        self,
        group_id: str,
        fields: list[str],
        affected_user_count: int,
    ) -> None:
        """Record that group attributes were updated."""
        ...

    def group_deleted(self, group_id: str, member_count: int) -> None:
        """Record that a group and its memberships were deleted."""
        ...

    def members_added(self, group_id: str, user_count: int, access_level: int) -> None:
        """Record that users were granted membership."""
        ...

    def variable_changed(
        self, group_id: str, key: str, protected: bool, action: str
    ) -> None:
        """Record that a secret variable was added or removed."""
        ...

    def with_context(self, context: ObservationContext) -> GroupServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGroupServiceProbe:
    """Default implementation of GroupServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultGroupServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupServiceProbe(logger=self._logger, context=context)

    def group_created(
        self,
        group_id: str,
        path: str,
        parent_id: str | None,
        creator_id: str,
    ) -> None:
        """Record that a group was created."""
        self._logger.info(
            "group_created",
            group_id=group_id,
            path=path,
            parent_id=parent_id,
            creator_id=creator_id,
            **self._get_context_kwargs(),
        )

    def group_creation_failed(
        self,
        path: str,
        parent_id: str | None,
        error: str,
    ) -> None:
        """Record that group creation failed."""
        self._logger.error(
            "group_creation_failed",
            path=path,
            parent_id=parent_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def group_updated(
        self,
        group_id: str,
        fields: list[str],
        affected_user_count: int,
    ) -> None:
        """Record that group attributes were updated."""
        self._logger.info(
            "group_updated",
            group_id=group_id,
            fields=fields,
            affected_user_count=affected_user_count,
            **self._get_context_kwargs(),
        )

    def group_deleted(self, group_id: str, member_count: int) -> None:
        """Record that a group and its memberships were deleted."""
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            member_count=member_count,
            **self._get_context_kwargs(),
        )

    def members_added(self, group_id: str, user_count: int, access_level: int) -> None:
        """Record that users were granted membership."""
        self._logger.info(
            "group_members_added",
            group_id=group_id,
            user_count=user_count,
            access_level=access_level,
            **self._get_context_kwargs(),
        )

    def variable_changed(
        self, group_id: str, key: str, protected: bool, action: str
    ) -> None:
        """Record that a secret variable was added or removed."""
        self._logger.info(
            "group_variable_changed",
            group_id=group_id,
            key=key,
            protected=protected,
            action=action,
            **self._get_context_kwargs(),
        )
