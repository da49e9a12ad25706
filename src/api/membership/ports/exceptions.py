"""Port-level exceptions for the membership bounded context.

These exceptions represent persistence and authorization outcomes that
application services raise and callers translate (for example into HTTP
status codes at an API boundary).
"""


class DuplicateGroupPathError(Exception):
    """Raised when a sibling group already uses the same path.

    Paths are unique among the children of one parent; top-level groups
    share a single namespace.
    """

    pass


class DuplicateGroupNameError(Exception):
    """Raised when a sibling group already uses the same name."""

    pass


class GroupNotFoundError(Exception):
    """Raised when a mutation targets a group that does not exist.

    Read operations return None or empty results instead.
    """

    pass


class ProjectNotFoundError(Exception):
    """Raised when an operation targets a project that does not exist."""

    pass


class UserNotFoundError(Exception):
    """Raised when an operation targets a user that does not exist."""

    pass


class UnauthorizedError(Exception):
    """Raised when a user lacks the access level an operation requires.

    The decision is always made by the membership resolver; callers should
    translate this into a 403 response without exposing internal details.
    """

    pass
