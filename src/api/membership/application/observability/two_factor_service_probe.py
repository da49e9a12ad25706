"""Protocol for two-factor cascade observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TwoFactorServiceProbe(Protocol):
    """Domain probe for two-factor requirement recomputation."""

    def recompute_started(self, user_count: int) -> None:
        """Record the start of a recompute batch."""
        ...

    def user_recomputed(self, user_id: str, changed: bool) -> None:
        """Record that one user's requirement was recomputed."""
        ...

    def user_recompute_retrying(self, user_id: str, attempt: int, error: str) -> None:
        """Record that recomputing one user failed and will be retried."""
        ...

    def user_recompute_failed(self, user_id: str, error: str) -> None:
        """Record that recomputing one user failed for good."""
        ...

    def recompute_finished(self, updated: int, unchanged: int, failed: int) -> None:
        """Record the outcome of a recompute batch."""
        ...

    def with_context(self, context: ObservationContext) -> TwoFactorServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTwoFactorServiceProbe:
    """Default implementation of TwoFactorServiceProbe using structlog."""

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
    ) -> DefaultTwoFactorServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTwoFactorServiceProbe(logger=self._logger, context=context)

    def recompute_started(self, user_count: int) -> None:
        self._logger.info(
            "two_factor_recompute_started",
            user_count=user_count,
            **self._get_context_kwargs(),
        )

    def user_recomputed(self, user_id: str, changed: bool) -> None:
        self._logger.debug(
            "two_factor_user_recomputed",
            user_id=user_id,
            changed=changed,
            **self._get_context_kwargs(),
        )

    def user_recompute_retrying(self, user_id: str, attempt: int, error: str) -> None:
        self._logger.warning(
            "two_factor_user_recompute_retrying",
            user_id=user_id,
            attempt=attempt,
            error=error,
            **self._get_context_kwargs(),
        )

    def user_recompute_failed(self, user_id: str, error: str) -> None:
        self._logger.error(
            "two_factor_user_recompute_failed",
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def recompute_finished(self, updated: int, unchanged: int, failed: int) -> None:
        self._logger.info(
            "two_factor_recompute_finished",
            updated=updated,
            unchanged=unchanged,
            failed=failed,
            **self._get_context_kwargs(),
        )
