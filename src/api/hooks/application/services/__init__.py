"""Application services for the hooks bounded context."""

from hooks.application.services.project_hook_service import ProjectHookService

__all__ = ["ProjectHookService"]
