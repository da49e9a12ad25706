"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class DatabaseProbe(Protocol):
    """Domain probe for database engine lifecycle."""

    def engine_created(self, role: str, host: str, database: str) -> None:
        """Record that an engine (and its pool) was created."""
        ...

    def session_rolled_back(self, role: str, error: Exception) -> None:
        """Record that a session was rolled back because of an error."""
        ...

    def pool_closed(self, role: str) -> None:
        """Record that an engine's pool was disposed."""
        ...

    def with_context(self, context: ObservationContext) -> DatabaseProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultDatabaseProbe:
    """Default implementation of DatabaseProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultDatabaseProbe:
        """Create a new probe with observation context bound."""
        return DefaultDatabaseProbe(logger=self._logger, context=context)

    def engine_created(self, role: str, host: str, database: str) -> None:
        """Record that an engine (and its pool) was created."""
        self._logger.info(
            "database_engine_created",
            role=role,
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def session_rolled_back(self, role: str, error: Exception) -> None:
        """Record that a session was rolled back because of an error."""
        self._logger.warning(
            "database_session_rolled_back",
            role=role,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def pool_closed(self, role: str) -> None:
        """Record that an engine's pool was disposed."""
        self._logger.info(
            "database_pool_closed",
            role=role,
            **self._get_context_kwargs(),
        )
