"""Ports for the hooks bounded context."""

from hooks.ports.exceptions import (
    ProjectHookNotFoundError,
    ProjectNotFoundError,
    UnauthorizedError,
)
from hooks.ports.repositories import IProjectHookRepository

__all__ = [
    "IProjectHookRepository",
    "ProjectHookNotFoundError",
    "ProjectNotFoundError",
    "UnauthorizedError",
]
