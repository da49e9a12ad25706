"""Domain probe for project hook service operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ProjectHookServiceProbe(Protocol):
    """Domain probe for project hook service operations."""

    def hook_added(self, project_id: str, hook_id: str, events: list[str]) -> None:
        """Record that a hook was registered."""
        ...

    def hook_updated(self, project_id: str, hook_id: str, events: list[str]) -> None:
        """Record that a hook was changed."""
        ...

    def hook_deleted(self, project_id: str, hook_id: str) -> None:
        """Record that a hook was removed."""
        ...

    def hook_not_found(self, project_id: str, hook_id: str) -> None:
        """Record that a hook lookup failed."""
        ...

    def invalid_hook_rejected(self, project_id: str, error: str) -> None:
        """Record that a hook was rejected for a missing or invalid URL."""
        ...

    def with_context(self, context: ObservationContext) -> ProjectHookServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProjectHookServiceProbe:
    """Default implementation of ProjectHookServiceProbe using structlog."""

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
    ) -> DefaultProjectHookServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultProjectHookServiceProbe(logger=self._logger, context=context)

    def hook_added(self, project_id: str, hook_id: str, events: list[str]) -> None:
        """Record that a hook was registered."""
        self._logger.info(
            "project_hook_added",
            project_id=project_id,
            hook_id=hook_id,
            events=events,
            **self._get_context_kwargs(),
        )

    def hook_updated(self, project_id: str, hook_id: str, events: list[str]) -> None:
        """Record that a hook was changed."""
        self._logger.info(
            "project_hook_updated",
            project_id=project_id,
            hook_id=hook_id,
            events=events,
            **self._get_context_kwargs(),
        )

    def hook_deleted(self, project_id: str, hook_id: str) -> None:
        """Record that a hook was removed."""
        self._logger.info(
            "project_hook_deleted",
            project_id=project_id,
            hook_id=hook_id,
            **self._get_context_kwargs(),
        )

    def hook_not_found(self, project_id: str, hook_id: str) -> None:
        """Record that a hook lookup failed."""
        self._logger.debug(
            "project_hook_not_found",
            project_id=project_id,
            hook_id=hook_id,
            **self._get_context_kwargs(),
        )

    def invalid_hook_rejected(self, project_id: str, error: str) -> None:
        """Record that a hook was rejected for a missing or invalid URL."""
        self._logger.warning(
            "project_hook_rejected",
            project_id=project_id,
            error=error,
            **self._get_context_kwargs(),
        )
