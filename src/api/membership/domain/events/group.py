"""Group domain events for the membership context.

Domain events related to group lifecycle, membership management and
two-factor policy changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MemberSnapshot:
    """Immutable snapshot of a membership at a point in time.

    Used in GroupDeleted to capture the memberships that are removed along
    with the group.

    Attributes:
        user_id: The ULID of the user
        access_level: The numeric access level the user had
        state: "active" or "requesting_access"
    """

    user_id: str
    access_level: int
    state: str


@dataclass(frozen=True)
class GroupCreated:
    """Event raised when a new group is created.

    Attributes:
        group_id: The ULID of the created group
        parent_id: The ULID of the parent group, if nested
        path: The group's path segment
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    parent_id: str | None
    path: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupDeleted:
    """Event raised when a group is deleted.

    Memberships are destroyed with the group; the snapshot lets consumers
    react to every removed membership without further lookups.

    Attributes:
        group_id: The ULID of the deleted group
        members: Snapshot of memberships at deletion time
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    members: tuple[MemberSnapshot, ...]
    occurred_at: datetime


@dataclass(frozen=True)
class MemberAdded:
    """Event raised when a user gains an active membership.

    Attributes:
        group_id: The ULID of the group
        user_id: The ULID of the user being added
        access_level: The level assigned to the member
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    user_id: str
    access_level: int
    occurred_at: datetime


@dataclass(frozen=True)
class MemberAccessLevelChanged:
    """Event raised when an active member's level is replaced.

    Attributes:
        group_id: The ULID of the group
        user_id: The ULID of the user whose level changed
        old_access_level: The previous level
        new_access_level: The new level
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    user_id: str
    old_access_level: int
    new_access_level: int
    occurred_at: datetime


@dataclass(frozen=True)
class MemberRemoved:
    """Event raised when a membership (active or requested) is removed.

    Attributes:
        group_id: The ULID of the group
        user_id: The ULID of the user being removed
        access_level: The level the membership had
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    user_id: str
    access_level: int
    occurred_at: datetime


@dataclass(frozen=True)
class AccessRequested:
    """Event raised when a user asks to join a group.

    Attributes:
        group_id: The ULID of the group
        user_id: The ULID of the requesting user
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class TwoFactorRequirementChanged:
    """Event raised when a group's two-factor policy changes.

    Recorded once per update even when both policy fields change in the
    same update. Consumers recompute the derived requirement of every
    listed user after the update commits.

    Attributes:
        group_id: The ULID of the group
        user_ids: Active members at the time of the change, each listed once
        occurred_at: When the event occurred (UTC)
    """

    group_id: str
    user_ids: tuple[str, ...]
    occurred_at: datetime
