"""Domain probe for project hook repository operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ProjectHookRepositoryProbe(Protocol):
    """Domain probe for project hook repository operations."""

    def hook_saved(self, hook_id: str, project_id: str) -> None:
        ...

    def hook_not_found(self, hook_id: str) -> None:
        ...

    def hook_deleted(self, hook_id: str) -> None:
        ...

    def with_context(self, context: ObservationContext) -> ProjectHookRepositoryProbe:
        ...


class DefaultProjectHookRepositoryProbe:
    """Default implementation of ProjectHookRepositoryProbe using structlog."""

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
    ) -> DefaultProjectHookRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultProjectHookRepositoryProbe(logger=self._logger, context=context)

    def hook_saved(self, hook_id: str, project_id: str) -> None:
        self._logger.info(
            "project_hook_saved",
            hook_id=hook_id,
            project_id=project_id,
            **self._get_context_kwargs(),
        )

    def hook_not_found(self, hook_id: str) -> None:
        self._logger.debug(
            "project_hook_not_found",
            hook_id=hook_id,
            **self._get_context_kwargs(),
        )

    def hook_deleted(self, hook_id: str) -> None:
        self._logger.info(
            "project_hook_deleted",
            hook_id=hook_id,
            **self._get_context_kwargs(),
        )
