"""User aggregate for the membership context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from membership.domain.value_objects import UserId

if TYPE_CHECKING:
    from membership.domain.aggregates.group import Group

DEFAULT_GRACE_PERIOD = 48


@dataclass
class User:
    """User aggregate representing a person who can hold memberships.

    The two-factor fields are derived from the groups the user belongs to
    and are recomputed whenever one of those groups changes its policy.
    """

    id: UserId
    username: str
    require_two_factor_authentication_from_group: bool = False
    two_factor_grace_period: int = DEFAULT_GRACE_PERIOD

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.username})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)

    def update_two_factor_requirement(
        self,
        groups: list[Group],
        default_grace_period: int = DEFAULT_GRACE_PERIOD,
    ) -> bool:
        """Recompute the two-factor requirement from the user's groups.

        The result depends only on the given groups, so running it twice
        with the same input leaves the user unchanged.

        Args:
            groups: Groups the user belongs to, including inherited ones.
                Groups that do not require two-factor are ignored.
            default_grace_period: Grace period when no group imposes one

        Returns:
            True if either field changed
        """
        periods = [
            g.two_factor_grace_period
            for g in groups
            if g.require_two_factor_authentication
            and g.two_factor_grace_period is not None
        ]
        required = any(g.require_two_factor_authentication for g in groups)
        grace_period = min(periods) if periods else default_grace_period

        changed = (
            required != self.require_two_factor_authentication_from_group
            or grace_period != self.two_factor_grace_period
        )
        self.require_two_factor_authentication_from_group = required
        self.two_factor_grace_period = grace_period
        return changed
