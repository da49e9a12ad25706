"""Application-layer value objects for the membership bounded context.

Read-only results returned by application services.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from membership.domain.aggregates import Group
from membership.domain.value_objects import UserId


@dataclass(frozen=True)
class TwoFactorCascadeResult:
    """Outcome of recomputing two-factor requirements for a batch of users.

    Every requested user lands in exactly one of the three buckets. Users
    in ``failed`` can be passed to a later recompute call; recomputing a
    user that already succeeded is harmless.
    """

    updated: tuple[UserId, ...] = ()
    unchanged: tuple[UserId, ...] = ()
    failed: tuple[UserId, ...] = ()

    @property
    def succeeded(self) -> bool:
        """True when no user failed."""
        return not self.failed


@dataclass(frozen=True)
class GroupUpdateResult:
    """Result of updating group attributes.

    ``affected_user_ids`` lists the active members whose two-factor
    requirement depends on the change; it is empty unless a two-factor
    field changed. ``cascade`` is filled when the service processed them.
    """

    group: Group
    affected_user_ids: tuple[UserId, ...] = ()
    cascade: TwoFactorCascadeResult | None = field(default=None)
