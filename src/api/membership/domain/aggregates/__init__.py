"""Domain aggregates for the membership context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from membership.domain.aggregates.group import Group
from membership.domain.aggregates.project import Project
from membership.domain.aggregates.user import User

__all__ = [
    "Group",
    "Project",
    "User",
]
