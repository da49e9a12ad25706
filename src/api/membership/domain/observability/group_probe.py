"""Observability probes for the Group aggregate.

Domain probes for Group following the Domain Oriented Observability pattern.
Probes emit structured logs with domain-specific context for membership
changes and policy updates.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import Protocol

import structlog


class GroupProbe(Protocol):
    """Protocol for group aggregate observability probes."""

    def member_added(self, group_id: str, user_id: str, access_level: int) -> None:
        """Probe emitted when a user gains an active membership."""
        ...

    def member_access_level_changed(
        self,
        group_id: str,
        user_id: str,
        old_access_level: int,
        new_access_level: int,
    ) -> None:
        """Probe emitted when an existing member is re-added at another level."""
        ...

    def member_removed(self, group_id: str, user_id: str, access_level: int) -> None:
        """Probe emitted when a membership is removed."""
        ...

    def access_requested(self, group_id: str, user_id: str) -> None:
        """Probe emitted when a user requests access."""
        ...

    def two_factor_policy_changed(
        self,
        group_id: str,
        changed_fields: list[str],
        affected_user_count: int,
    ) -> None:
        """Probe emitted when require_two_factor_authentication or the grace
        period change.

        Args:
            group_id: The group ID
            changed_fields: Which two-factor fields changed in this update
            affected_user_count: Number of active members to recompute
        """
        ...


class DefaultGroupProbe:
    """Default implementation of GroupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger()

    def member_added(self, group_id: str, user_id: str, access_level: int) -> None:
        """Log member addition with structured context."""
        self._logger.info(
            "group_member_added",
            group_id=group_id,
            user_id=user_id,
            access_level=access_level,
        )

    def member_access_level_changed(
        self,
        group_id: str,
        user_id: str,
        old_access_level: int,
        new_access_level: int,
    ) -> None:
        """Log access level replacement with structured context."""
        self._logger.info(
            "group_member_access_level_changed",
            group_id=group_id,
            user_id=user_id,
            old_access_level=old_access_level,
            new_access_level=new_access_level,
        )

    def member_removed(self, group_id: str, user_id: str, access_level: int) -> None:
        """Log member removal with structured context."""
        self._logger.info(
            "group_member_removed",
            group_id=group_id,
            user_id=user_id,
            access_level=access_level,
        )

    def access_requested(self, group_id: str, user_id: str) -> None:
        """Log access request with structured context."""
        self._logger.info(
            "group_access_requested",
            group_id=group_id,
            user_id=user_id,
        )

    def two_factor_policy_changed(
        self,
        group_id: str,
        changed_fields: list[str],
        affected_user_count: int,
    ) -> None:
        """Log two-factor policy change with structured context."""
        self._logger.info(
            "group_two_factor_policy_changed",
            group_id=group_id,
            changed_fields=changed_fields,
            affected_user_count=affected_user_count,
        )
