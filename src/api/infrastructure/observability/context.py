"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with every
    probe event so that a single resolution can be correlated end to end.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        actor_id: Identifier of the user performing the operation.
        group_id: Group the operation is scoped to (if applicable).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", actor_id="user-456")
        probe = DefaultMembershipResolverProbe().with_context(context)
    """

    request_id: str | None = None
    actor_id: str | None = None
    group_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id
        if self.group_id is not None:
            result["scope_group_id"] = self.group_id
        result.update(self.extra)
        return result

    def with_group(self, group_id: str) -> ObservationContext:
        """Create a new context scoped to a group."""
        return ObservationContext(
            request_id=self.request_id,
            actor_id=self.actor_id,
            group_id=group_id,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            actor_id=self.actor_id,
            group_id=self.group_id,
            extra={**self.extra, **kwargs},
        )
