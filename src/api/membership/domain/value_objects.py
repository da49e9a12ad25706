"""Value objects for the membership domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum

from ulid import ULID


def _validate_ulid(value: str, kind: str) -> str:
    try:
        ULID.from_str(value)
    except ValueError as e:
        raise ValueError(f"Invalid {kind}: {value}") from e
    return value


@dataclass(frozen=True)
class GroupId:
    """Identifier for a Group aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> GroupId:
        """Generate a new GroupId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> GroupId:
        """Create GroupId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        return cls(value=_validate_ulid(value, "GroupId"))


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        return cls(value=_validate_ulid(value, "UserId"))


@dataclass(frozen=True)
class ProjectId:
    """Identifier for a Project aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> ProjectId:
        """Generate a new ProjectId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> ProjectId:
        """Create ProjectId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        return cls(value=_validate_ulid(value, "ProjectId"))


@dataclass(frozen=True)
class VariableId:
    """Identifier for a group-level secret variable."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> VariableId:
        """Generate a new VariableId using ULID."""
        return cls(value=str(ULID()))


class AccessLevel(IntEnum):
    """Ordered roles for group membership.

    Each level grants everything the levels below it grant, so levels can be
    compared directly (``AccessLevel.MASTER > AccessLevel.DEVELOPER``).
    """

    GUEST = 10
    REPORTER = 20
    DEVELOPER = 30
    MASTER = 40
    OWNER = 50

    @property
    def label(self) -> str:
        """Human readable role name."""
        return self.name.capitalize()


class MembershipState(StrEnum):
    """Lifecycle state of a membership record."""

    ACTIVE = "active"
    REQUESTING_ACCESS = "requesting_access"


class Visibility(IntEnum):
    """Who can see a group."""

    PRIVATE = 0
    INTERNAL = 10
    PUBLIC = 20


class BranchProtection(IntEnum):
    """Instance-wide default branch protection policy."""

    NONE = 0
    DEV_CAN_PUSH = 1
    FULL = 2
    DEV_CAN_MERGE = 3

    def protects_empty_repositories(self) -> bool:
        """Whether the policy protects every ref of a project with no commits yet."""
        return self in (BranchProtection.FULL, BranchProtection.DEV_CAN_MERGE)


@dataclass(frozen=True)
class Membership:
    """A user's membership in a group.

    Active memberships carry the user's access level. A membership in the
    requesting-access state records a pending request and grants nothing
    until it is approved.
    """

    user_id: UserId
    access_level: AccessLevel
    state: MembershipState = MembershipState.ACTIVE
    requested_at: datetime | None = None

    def is_active(self) -> bool:
        """Check if this membership grants access."""
        return self.state == MembershipState.ACTIVE

    def is_requesting(self) -> bool:
        """Check if this membership is a pending access request."""
        return self.state == MembershipState.REQUESTING_ACCESS

    def is_owner(self) -> bool:
        """Check if this is an active owner membership."""
        return self.is_active() and self.access_level == AccessLevel.OWNER


@dataclass(frozen=True)
class SecretVariable:
    """A CI secret owned by exactly one group.

    The value is kept out of ``repr`` so that variables can be logged safely.
    """

    id: VariableId
    group_id: GroupId
    key: str
    value: str = field(repr=False)
    protected: bool = False
