"""Port-level exceptions for the hooks bounded context.

Missing projects and authorization failures reuse the membership context's
exceptions, since the decision is made there.
"""

from membership.ports.exceptions import ProjectNotFoundError, UnauthorizedError


class ProjectHookNotFoundError(Exception):
    """Raised when a hook does not exist or belongs to another project."""

    pass


__all__ = [
    "ProjectHookNotFoundError",
    "ProjectNotFoundError",
    "UnauthorizedError",
]
