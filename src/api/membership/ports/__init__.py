"""Ports (interfaces) for the membership bounded context.

Ports define the contracts for repositories and domain services without
specifying implementation details. This allows for dependency inversion
and makes the domain layer independent of infrastructure.
"""

from membership.ports.exceptions import (
    DuplicateGroupNameError,
    DuplicateGroupPathError,
    GroupNotFoundError,
    ProjectNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from membership.ports.repositories import (
    IGroupRepository,
    IProjectRepository,
    IUserRepository,
)

__all__ = [
    "IGroupRepository",
    "IProjectRepository",
    "IUserRepository",
    "DuplicateGroupNameError",
    "DuplicateGroupPathError",
    "GroupNotFoundError",
    "ProjectNotFoundError",
    "UnauthorizedError",
    "UserNotFoundError",
]
