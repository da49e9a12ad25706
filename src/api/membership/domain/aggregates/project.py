"""Project aggregate for the membership context.

Only the parts of a project that decide ref protection live here: the
owning group and the protected branch and tag rules.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from membership.domain.value_objects import BranchProtection, GroupId, ProjectId


@dataclass
class Project:
    """Project aggregate owned by a group.

    Protection rules are names or patterns; ``*`` matches any run of
    characters, so ``release/*`` protects every release branch.
    """

    id: ProjectId
    name: str
    group_id: GroupId
    default_branch: str = "master"
    empty_repo: bool = True
    protected_branches: list[str] = field(default_factory=list)
    protected_tags: list[str] = field(default_factory=list)

    @classmethod
    def create(cls, name: str, group_id: GroupId) -> "Project":
        """Factory method for creating a new, empty project.

        Raises:
            ValueError: If name is empty or exceeds 255 characters
        """
        if not name or len(name) > 255:
            raise ValueError("Project name must be between 1 and 255 characters")
        return cls(id=ProjectId.generate(), name=name, group_id=group_id)

    def protect_branch(self, pattern: str) -> None:
        """Add a protected branch rule.

        Raises:
            ValueError: If the pattern is empty or already protected
        """
        self._add_rule(self.protected_branches, pattern, "branch")

    def protect_tag(self, pattern: str) -> None:
        """Add a protected tag rule.

        Raises:
            ValueError: If the pattern is empty or already protected
        """
        self._add_rule(self.protected_tags, pattern, "tag")

    def is_protected_branch(
        self, ref: str, default_branch_protection: BranchProtection
    ) -> bool:
        """Check if a branch is protected by a rule or by blanket policy."""
        if self.empty_repo and default_branch_protection.protects_empty_repositories():
            return True
        return any(_matches(pattern, ref) for pattern in self.protected_branches)

    def is_protected_tag(self, ref: str) -> bool:
        """Check if a tag is protected by a rule."""
        return any(_matches(pattern, ref) for pattern in self.protected_tags)

    def is_protected_ref(
        self, ref: str, default_branch_protection: BranchProtection
    ) -> bool:
        """Check if a ref (branch or tag name) is protected for this project."""
        return self.is_protected_branch(
            ref, default_branch_protection
        ) or self.is_protected_tag(ref)

    @staticmethod
    def _add_rule(rules: list[str], pattern: str, kind: str) -> None:
        pattern = pattern.strip()
        if not pattern:
            raise ValueError(f"Protected {kind} name cannot be empty")
        if pattern in rules:
            raise ValueError(f"Protected {kind} {pattern} already exists")
        rules.append(pattern)


def _matches(pattern: str, ref: str) -> bool:
    if "*" not in pattern:
        return pattern == ref
    regex = ".*?".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, ref) is not None
