"""SQLAlchemy ORM models for the hooks bounded context."""

from hooks.infrastructure.models.project_hook import ProjectHookModel

# Registers the projects table that project_hooks references
from membership.infrastructure.models import ProjectModel  # noqa: F401, E402

__all__ = ["ProjectHookModel"]
