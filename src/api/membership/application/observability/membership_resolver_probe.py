"""Protocol for membership resolver observability.

Defines the interface for domain probes that capture how access and
variable lookups were resolved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class MembershipResolverProbe(Protocol):
    """Domain probe for membership resolution."""

    def chain_loaded(self, group_id: str, depth: int) -> None:
        """Record that an ancestor chain was loaded."""
        ...

    def group_not_found(self, group_id: str) -> None:
        """Record that resolution targeted an unknown group."""
        ...

    def access_denied(
        self,
        group_id: str,
        user_id: str,
        required_level: int,
        effective_level: int | None,
    ) -> None:
        """Record that a user fell short of a required level."""
        ...

    def secret_variables_resolved(
        self,
        group_id: str,
        project_id: str,
        protected_ref: bool,
        count: int,
    ) -> None:
        """Record how many variables a ref can see."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMembershipResolverProbe:
    """Default implementation of MembershipResolverProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultMembershipResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipResolverProbe(logger=self._logger, context=context)

    def chain_loaded(self, group_id: str, depth: int) -> None:
        """Record that an ancestor chain was loaded."""
        self._logger.debug(
            "ancestor_chain_loaded",
            group_id=group_id,
            depth=depth,
            **self._get_context_kwargs(),
        )

    def group_not_found(self, group_id: str) -> None:
        """Record that resolution targeted an unknown group."""
        self._logger.debug(
            "resolver_group_not_found",
            group_id=group_id,
            **self._get_context_kwargs(),
        )

    def access_denied(
        self,
        group_id: str,
        user_id: str,
        required_level: int,
        effective_level: int | None,
    ) -> None:
        """Record that a user fell short of a required level."""
        self._logger.warning(
            "group_access_denied",
            group_id=group_id,
            user_id=user_id,
            required_level=required_level,
            effective_level=effective_level,
            **self._get_context_kwargs(),
        )

    def secret_variables_resolved(
        self,
        group_id: str,
        project_id: str,
        protected_ref: bool,
        count: int,
    ) -> None:
        """Record how many variables a ref can see."""
        self._logger.info(
            "secret_variables_resolved",
            group_id=group_id,
            project_id=project_id,
            protected_ref=protected_ref,
            count=count,
            **self._get_context_kwargs(),
        )
