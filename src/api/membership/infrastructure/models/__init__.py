"""SQLAlchemy ORM models for the membership bounded context.

These models map to database tables and are used by repository implementations.
"""

from membership.infrastructure.models.group import (
    GroupMemberModel,
    GroupModel,
    GroupVariableModel,
)
from membership.infrastructure.models.project import (
    ProjectModel,
    ProtectedBranchModel,
    ProtectedTagModel,
)
from membership.infrastructure.models.user import UserModel

__all__ = [
    "GroupMemberModel",
    "GroupModel",
    "GroupVariableModel",
    "ProjectModel",
    "ProtectedBranchModel",
    "ProtectedTagModel",
    "UserModel",
]
