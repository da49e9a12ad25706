"""Group aggregate for the membership context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from membership.domain.events import (
    AccessRequested,
    GroupCreated,
    GroupDeleted,
    MemberAccessLevelChanged,
    MemberAdded,
    MemberRemoved,
    MemberSnapshot,
    TwoFactorRequirementChanged,
)
from membership.domain.exceptions import (
    AccessRequestsDisabledError,
    GroupValidationError,
)
from membership.domain.observability import DefaultGroupProbe, GroupProbe
from membership.domain.path_rules import path_errors
from membership.domain.value_objects import (
    AccessLevel,
    GroupId,
    Membership,
    MembershipState,
    SecretVariable,
    UserId,
    VariableId,
    Visibility,
)

if TYPE_CHECKING:
    from membership.domain.events import DomainEvent

DEFAULT_TWO_FACTOR_GRACE_PERIOD = 48
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "bmp", "tiff", "ico"})
AVATAR_PATH_TEMPLATE = "/uploads/-/system/group/avatar/{group_id}/{filename}"
VARIABLE_KEY_FORMAT = re.compile(r"^[a-zA-Z0-9_]+$")

TWO_FACTOR_FIELDS = ("require_two_factor_authentication", "two_factor_grace_period")
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "path",
        "description",
        "visibility",
        "avatar",
        "require_two_factor_authentication",
        "two_factor_grace_period",
        "lfs_enabled",
        "request_access_enabled",
    }
)


@dataclass
class Group:
    """Group aggregate: a node in the namespace tree plus its memberships.

    The parent is referenced by id only. Memberships stored here are the
    group's direct memberships; inherited access is resolved over the
    ancestor chain (see ``membership.domain.hierarchy``).

    Business rules:
    - A user holds at most one membership per group (active or requesting)
    - Re-adding a member replaces the access level, it never duplicates
    - Requesting-access memberships grant nothing until approved
    - The last owner cannot be removed
    - Secret variable keys are unique within the group

    Event collection:
    - All mutating operations record domain events
    - Events can be collected via collect_events()
    """

    id: GroupId
    name: str
    path: str
    parent_id: GroupId | None = None
    visibility: Visibility = Visibility.PRIVATE
    description: str = ""
    avatar: str | None = None
    require_two_factor_authentication: bool = False
    two_factor_grace_period: int | None = DEFAULT_TWO_FACTOR_GRACE_PERIOD
    lfs_enabled: bool | None = None
    request_access_enabled: bool = False
    memberships: list[Membership] = field(default_factory=list)
    variables: list[SecretVariable] = field(default_factory=list)
    _pending_events: list[DomainEvent] = field(
        default_factory=list, repr=False, compare=False
    )
    _probe: GroupProbe = field(
        default_factory=DefaultGroupProbe, repr=False, compare=False
    )

    @classmethod
    def create(
        cls,
        name: str,
        path: str,
        parent_id: GroupId | None = None,
        probe: GroupProbe | None = None,
        **attributes: Any,
    ) -> "Group":
        """Factory method for creating a new, validated group.

        Args:
            name: Display name
            path: URL path segment, unique among siblings
            parent_id: Parent group, or None for a top-level group
            probe: Optional observability probe for domain events
            **attributes: Any other updatable group attribute

        Returns:
            A new Group aggregate with GroupCreated event recorded

        Raises:
            GroupValidationError: If any attribute is invalid
            ValueError: If an unknown attribute is given
        """
        unknown = set(attributes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown group attributes: {sorted(unknown)}")
        if "visibility" in attributes:
            attributes["visibility"] = Visibility(attributes["visibility"])

        group = cls(
            id=GroupId.generate(),
            name=name,
            path=path,
            parent_id=parent_id,
            _probe=probe or DefaultGroupProbe(),
            **attributes,
        )
        group.validate()
        group._pending_events.append(
            GroupCreated(
                group_id=group.id.value,
                parent_id=parent_id.value if parent_id else None,
                path=path,
                occurred_at=datetime.now(UTC),
            )
        )
        return group

    @property
    def is_top_level(self) -> bool:
        """Whether the group has no parent."""
        return self.parent_id is None

    @property
    def human_name(self) -> str:
        """Name shown to people."""
        return self.name

    def to_reference(self) -> str:
        """Return the reference used to mention this group in text."""
        return f"@{self.name}"

    # Validation

    def errors(self) -> dict[str, list[str]]:
        """Collect field-scoped validation errors."""
        errors: dict[str, list[str]] = {}

        if not self.name or not self.name.strip():
            errors.setdefault("name", []).append("can't be blank")
        elif len(self.name) > 255:
            errors.setdefault("name", []).append("is too long (maximum is 255)")

        messages = path_errors(self.path, top_level=self.is_top_level)
        if messages:
            errors["path"] = messages

        period = self.two_factor_grace_period
        if period is None:
            errors.setdefault("two_factor_grace_period", []).append("can't be blank")
        elif isinstance(period, bool) or not isinstance(period, int):
            errors.setdefault("two_factor_grace_period", []).append(
                "is not a number"
            )
        elif period < 0:
            errors.setdefault("two_factor_grace_period", []).append(
                "must be greater than or equal to 0"
            )

        if self.avatar and not _is_image(self.avatar):
            errors.setdefault("avatar", []).append("only images allowed")

        return errors

    def is_valid(self) -> bool:
        """Check whether the group may be persisted."""
        return not self.errors()

    def validate(self) -> None:
        """Raise GroupValidationError when the group has errors."""
        errors = self.errors()
        if errors:
            raise GroupValidationError(errors)

    # Membership

    def add_user(self, user_id: UserId, access_level: AccessLevel) -> Membership:
        """Grant a user an active membership at the given level.

        Idempotent upsert: an existing active membership has its level
        replaced, and a pending access request for the user becomes the
        active membership. Adding a member at their current level changes
        nothing.

        Args:
            user_id: The user to add
            access_level: The level to assign

        Returns:
            The user's active membership
        """
        access_level = AccessLevel(access_level)
        existing = self._find_membership(user_id)
        membership = Membership(user_id=user_id, access_level=access_level)

        if existing is not None and existing.is_active():
            if existing.access_level == access_level:
                return existing

            self._replace_membership(membership)
            self._pending_events.append(
                MemberAccessLevelChanged(
                    group_id=self.id.value,
                    user_id=user_id.value,
                    old_access_level=int(existing.access_level),
                    new_access_level=int(access_level),
                    occurred_at=datetime.now(UTC),
                )
            )
            self._probe.member_access_level_changed(
                group_id=self.id.value,
                user_id=user_id.value,
                old_access_level=int(existing.access_level),
                new_access_level=int(access_level),
            )
            return membership

        if existing is not None:
            self._replace_membership(membership)
        else:
            self.memberships.append(membership)

        self._pending_events.append(
            MemberAdded(
                group_id=self.id.value,
                user_id=user_id.value,
                access_level=int(access_level),
                occurred_at=datetime.now(UTC),
            )
        )
        self._probe.member_added(
            group_id=self.id.value,
            user_id=user_id.value,
            access_level=int(access_level),
        )
        return membership

    def add_users(
        self, user_ids: list[UserId], access_level: AccessLevel
    ) -> list[Membership]:
        """Add several users at the same level. Duplicate ids are added once."""
        seen: set[UserId] = set()
        memberships = []
        for user_id in user_ids:
            if user_id in seen:
                continue
            seen.add(user_id)
            memberships.append(self.add_user(user_id, access_level))
        return memberships

    def add_guest(self, user_id: UserId) -> Membership:
        return self.add_user(user_id, AccessLevel.GUEST)

    def add_reporter(self, user_id: UserId) -> Membership:
        return self.add_user(user_id, AccessLevel.REPORTER)

    def add_developer(self, user_id: UserId) -> Membership:
        return self.add_user(user_id, AccessLevel.DEVELOPER)

    def add_master(self, user_id: UserId) -> Membership:
        return self.add_user(user_id, AccessLevel.MASTER)

    def add_owner(self, user_id: UserId) -> Membership:
        return self.add_user(user_id, AccessLevel.OWNER)

    def request_access(self, user_id: UserId) -> Membership:
        """Record a pending request from a user to join the group.

        Does nothing when the user already has a membership of any kind.

        Raises:
            AccessRequestsDisabledError: If the group does not accept requests
        """
        if not self.request_access_enabled:
            raise AccessRequestsDisabledError(
                f"Group {self.id} does not accept access requests"
            )

        existing = self._find_membership(user_id)
        if existing is not None:
            return existing

        now = datetime.now(UTC)
        membership = Membership(
            user_id=user_id,
            access_level=AccessLevel.DEVELOPER,
            state=MembershipState.REQUESTING_ACCESS,
            requested_at=now,
        )
        self.memberships.append(membership)
        self._pending_events.append(
            AccessRequested(
                group_id=self.id.value,
                user_id=user_id.value,
                occurred_at=now,
            )
        )
        self._probe.access_requested(group_id=self.id.value, user_id=user_id.value)
        return membership

    def approve_access_request(
        self, user_id: UserId, access_level: AccessLevel = AccessLevel.DEVELOPER
    ) -> Membership:
        """Turn a pending request into an active membership.

        Raises:
            ValueError: If the user has no pending request
        """
        existing = self._find_membership(user_id)
        if existing is None or not existing.is_requesting():
            raise ValueError(f"User {user_id} has no pending access request")
        return self.add_user(user_id, access_level)

    def deny_access_request(self, user_id: UserId) -> None:
        """Drop a pending request.

        Raises:
            ValueError: If the user has no pending request
        """
        existing = self._find_membership(user_id)
        if existing is None or not existing.is_requesting():
            raise ValueError(f"User {user_id} has no pending access request")
        self._drop_membership(existing)

    def remove_member(self, user_id: UserId) -> None:
        """Remove a user's active membership.

        Raises:
            ValueError: If user is not a member or is the last owner
        """
        existing = self._find_membership(user_id)
        if existing is None or not existing.is_active():
            raise ValueError(f"User {user_id} is not a member of this group")

        if existing.is_owner() and len(self.owners()) == 1:
            raise ValueError(
                "Cannot remove the last owner. Promote another member first."
            )

        self._drop_membership(existing)

    def members(self) -> list[Membership]:
        """Active memberships held directly on this group."""
        return [m for m in self.memberships if m.is_active()]

    def requesters(self) -> list[Membership]:
        """Pending access requests held directly on this group."""
        return [m for m in self.memberships if m.is_requesting()]

    def members_at(self, access_level: AccessLevel) -> list[Membership]:
        """Active direct memberships at exactly the given level."""
        return [m for m in self.members() if m.access_level == access_level]

    def owners(self) -> list[UserId]:
        """Users holding an active direct Owner membership."""
        return [m.user_id for m in self.members_at(AccessLevel.OWNER)]

    def users(self) -> list[UserId]:
        """The group's users, which are exactly its owners."""
        return self.owners()

    def has_member(self, user_id: UserId) -> bool:
        """Check if a user holds an active direct membership."""
        return self.member_level(user_id) is not None

    def member_level(self, user_id: UserId) -> AccessLevel | None:
        """Return the user's direct active level, or None."""
        membership = self._find_membership(user_id)
        if membership is None or not membership.is_active():
            return None
        return membership.access_level

    # Attribute updates

    def update(self, **attributes: Any) -> list[UserId]:
        """Update group attributes.

        Args:
            **attributes: New values for updatable attributes

        Returns:
            Active members whose two-factor requirement must be recomputed.
            Non-empty only when require_two_factor_authentication or
            two_factor_grace_period actually changed; each user appears once.

        Raises:
            ValueError: If an unknown attribute is given
            GroupValidationError: If the new values are invalid (the group is
                left unchanged)
        """
        unknown = set(attributes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown group attributes: {sorted(unknown)}")
        if "visibility" in attributes:
            attributes["visibility"] = Visibility(attributes["visibility"])

        previous = {name: getattr(self, name) for name in attributes}
        changed = [
            name for name, value in attributes.items() if previous[name] != value
        ]

        for name in changed:
            setattr(self, name, attributes[name])

        errors = self.errors()
        if errors:
            for name in changed:
                setattr(self, name, previous[name])
            raise GroupValidationError(errors)

        two_factor_changes = [name for name in TWO_FACTOR_FIELDS if name in changed]
        if not two_factor_changes:
            return []

        affected = list(dict.fromkeys(m.user_id for m in self.members()))
        self._pending_events.append(
            TwoFactorRequirementChanged(
                group_id=self.id.value,
                user_ids=tuple(user_id.value for user_id in affected),
                occurred_at=datetime.now(UTC),
            )
        )
        self._probe.two_factor_policy_changed(
            group_id=self.id.value,
            changed_fields=two_factor_changes,
            affected_user_count=len(affected),
        )
        return affected

    # Avatar and LFS

    def set_avatar(self, filename: str | None) -> None:
        """Attach an avatar by filename, or clear it with None.

        Raises:
            GroupValidationError: If the file is not an image
        """
        if filename and not _is_image(filename):
            raise GroupValidationError({"avatar": ["only images allowed"]})
        self.avatar = filename

    def avatar_url(
        self,
        base_url: str,
        asset_host: str | None = None,
        only_path: bool = True,
    ) -> str | None:
        """Build the avatar URL.

        An asset host, when configured, always prefixes the path. Otherwise
        the path is returned as is unless a full URL is requested.
        """
        if not self.avatar:
            return None

        path = AVATAR_PATH_TEMPLATE.format(group_id=self.id.value, filename=self.avatar)
        if asset_host:
            return f"{asset_host}{path}"
        if only_path:
            return path
        return f"{base_url}{path}"

    def lfs_enabled_with(self, globally_enabled: bool) -> bool:
        """Resolve the LFS flag against the instance-wide switch."""
        if not globally_enabled:
            return False
        if self.lfs_enabled is None:
            return True
        return self.lfs_enabled

    # Secret variables

    def add_variable(
        self, key: str, value: str, protected: bool = False
    ) -> SecretVariable:
        """Create a secret variable owned by this group.

        Raises:
            ValueError: If the key is malformed or already used in this group
        """
        if not key or not VARIABLE_KEY_FORMAT.match(key):
            raise ValueError(
                "Variable key can contain only letters, digits and '_'"
            )
        if any(v.key == key for v in self.variables):
            raise ValueError(f"Variable {key} already exists in this group")

        variable = SecretVariable(
            id=VariableId.generate(),
            group_id=self.id,
            key=key,
            value=value,
            protected=protected,
        )
        self.variables.append(variable)
        return variable

    def remove_variable(self, key: str) -> SecretVariable:
        """Delete a secret variable by key.

        Raises:
            ValueError: If no variable has that key
        """
        for variable in self.variables:
            if variable.key == key:
                self.variables = [v for v in self.variables if v.key != key]
                return variable
        raise ValueError(f"Variable {key} does not exist in this group")

    def variables_for(self, protected_ref: bool) -> list[SecretVariable]:
        """Variables visible to a ref.

        Protected variables are only exposed to protected refs.
        """
        if protected_ref:
            return list(self.variables)
        return [v for v in self.variables if not v.protected]

    # Lifecycle

    def mark_for_deletion(self) -> None:
        """Record GroupDeleted with a snapshot of every membership.

        Memberships are destroyed along with the group.
        """
        members_snapshot = tuple(
            MemberSnapshot(
                user_id=m.user_id.value,
                access_level=int(m.access_level),
                state=m.state.value,
            )
            for m in self.memberships
        )
        self._pending_events.append(
            GroupDeleted(
                group_id=self.id.value,
                members=members_snapshot,
                occurred_at=datetime.now(UTC),
            )
        )

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events."""
        events = self._pending_events.copy()
        self._pending_events.clear()
        return events

    def _find_membership(self, user_id: UserId) -> Membership | None:
        for membership in self.memberships:
            if membership.user_id == user_id:
                return membership
        return None

    def _replace_membership(self, membership: Membership) -> None:
        self.memberships = [
            membership if m.user_id == membership.user_id else m
            for m in self.memberships
        ]

    def _drop_membership(self, membership: Membership) -> None:
        self.memberships = [
            m for m in self.memberships if m.user_id != membership.user_id
        ]
        self._pending_events.append(
            MemberRemoved(
                group_id=self.id.value,
                user_id=membership.user_id.value,
                access_level=int(membership.access_level),
                occurred_at=datetime.now(UTC),
            )
        )
        self._probe.member_removed(
            group_id=self.id.value,
            user_id=membership.user_id.value,
            access_level=int(membership.access_level),
        )


def _is_image(filename: str) -> bool:
    _, dot, extension = filename.rpartition(".")
    return bool(dot) and extension.lower() in IMAGE_EXTENSIONS
