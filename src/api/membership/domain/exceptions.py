"""Domain-level errors for the membership context.

All errors derive from ValueError, which is what aggregates raise for
rule violations. The subclasses carry enough structure for callers to
report them precisely.
"""

from __future__ import annotations


class GroupValidationError(ValueError):
    """Raised when a group fails validation.

    Errors are field-scoped, e.g. ``{"path": ["is reserved"]}``. The group
    must not be persisted while it carries errors.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        details = "; ".join(
            f"{attribute} {message}"
            for attribute, messages in errors.items()
            for message in messages
        )
        super().__init__(f"Group is invalid: {details}")


class GroupHierarchyCycleError(ValueError):
    """Raised when walking parent links revisits a group."""


class AccessRequestsDisabledError(ValueError):
    """Raised when requesting access to a group that does not accept requests."""
