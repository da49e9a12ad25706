"""Ancestor chains over the group tree.

Groups reference their parent by id. An AncestorChain is an immutable
snapshot of one group and all of its ancestors, nearest first, and is the
unit every inherited-access question is answered against. Building the
chain from a single snapshot means one answer never mixes states from
before and after a concurrent membership change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from membership.domain.aggregates import Group, Project
from membership.domain.exceptions import GroupHierarchyCycleError
from membership.domain.value_objects import (
    AccessLevel,
    BranchProtection,
    GroupId,
    Membership,
    SecretVariable,
    UserId,
)

# Deepest allowed chain, counting the group itself.
MAX_NESTING_DEPTH = 20


@dataclass(frozen=True)
class AncestorChain:
    """A group followed by its parent, grandparent, ... up to the root."""

    groups: tuple[Group, ...]

    def __post_init__(self) -> None:
        if not self.groups:
            raise ValueError("An ancestor chain needs at least one group")

    @classmethod
    def build(cls, group_id: GroupId, groups: Iterable[Group]) -> AncestorChain:
        """Walk parent links from group_id upwards.

        Args:
            group_id: The group the chain starts at
            groups: A snapshot containing the group and all of its ancestors

        Returns:
            The chain, nearest group first

        Raises:
            ValueError: If the group or one of its ancestors is missing
            GroupHierarchyCycleError: If parent links loop back on themselves
        """
        by_id = {group.id: group for group in groups}
        current = by_id.get(group_id)
        if current is None:
            raise ValueError(f"Group {group_id} is not part of the snapshot")

        chain: list[Group] = []
        visited: set[GroupId] = set()
        while True:
            if current.id in visited:
                raise GroupHierarchyCycleError(
                    f"Group {current.id} appears twice in the ancestors of {group_id}"
                )
            visited.add(current.id)
            chain.append(current)

            if current.parent_id is None:
                break
            parent = by_id.get(current.parent_id)
            if parent is None:
                raise ValueError(
                    f"Parent {current.parent_id} of group {current.id} "
                    "is not part of the snapshot"
                )
            current = parent

        return cls(groups=tuple(chain))

    @property
    def group(self) -> Group:
        """The group the chain starts at."""
        return self.groups[0]

    @property
    def ancestors(self) -> tuple[Group, ...]:
        """Ancestors only, nearest first."""
        return self.groups[1:]

    @property
    def root(self) -> Group:
        """The top-level group."""
        return self.groups[-1]

    @property
    def full_path(self) -> str:
        """Slash-separated paths from the root down to the group."""
        return "/".join(group.path for group in reversed(self.groups))

    @property
    def requires_two_factor(self) -> bool:
        """Whether the group or any ancestor enforces two-factor."""
        return any(group.require_two_factor_authentication for group in self.groups)

    def effective_access_level(self, user_id: UserId) -> AccessLevel | None:
        """Highest active level the user holds on the group or any ancestor."""
        levels = [
            level
            for level in (group.member_level(user_id) for group in self.groups)
            if level is not None
        ]
        return max(levels) if levels else None

    def has_access_at_least(self, user_id: UserId, access_level: AccessLevel) -> bool:
        """Check the user's effective level against a minimum."""
        effective = self.effective_access_level(user_id)
        return effective is not None and effective >= access_level

    def members_with_parents(self) -> list[Membership]:
        """Active memberships on the group and every ancestor, nearest first."""
        return [m for group in self.groups for m in group.members()]

    def user_ids_for_project_authorizations(self) -> list[UserId]:
        """Users whose project authorizations depend on this group, once each."""
        return list(dict.fromkeys(m.user_id for m in self.members_with_parents()))

    def secret_variables_for(
        self,
        ref: str,
        project: Project,
        default_branch_protection: BranchProtection,
    ) -> list[SecretVariable]:
        """Variables visible to a ref of a project, most specific group first.

        The group's own variables come first, then each ancestor's from the
        nearest to the root. Protected variables are included only when the
        ref is protected for the project.
        """
        protected = project.is_protected_ref(ref, default_branch_protection)
        return [
            variable
            for group in self.groups
            for variable in group.variables_for(protected_ref=protected)
        ]
