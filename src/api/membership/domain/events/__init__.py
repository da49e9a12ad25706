"""Domain events for the membership bounded context.

Domain events capture facts about things that have happened in the domain.
They are immutable value objects that carry all the information needed
to describe the occurrence of an event.
"""

from membership.domain.events.group import (
    AccessRequested,
    GroupCreated,
    GroupDeleted,
    MemberAccessLevelChanged,
    MemberAdded,
    MemberRemoved,
    MemberSnapshot,
    TwoFactorRequirementChanged,
)

# Type alias for all domain events in the membership context
DomainEvent = (
    GroupCreated
    | GroupDeleted
    | MemberAdded
    | MemberAccessLevelChanged
    | MemberRemoved
    | AccessRequested
    | TwoFactorRequirementChanged
)

__all__ = [
    "AccessRequested",
    "GroupCreated",
    "GroupDeleted",
    "MemberAccessLevelChanged",
    "MemberAdded",
    "MemberRemoved",
    "MemberSnapshot",
    "TwoFactorRequirementChanged",
    "DomainEvent",
]
