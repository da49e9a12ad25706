"""Domain-Oriented Observability for the hooks application layer."""

from hooks.application.observability.project_hook_service_probe import (
    DefaultProjectHookServiceProbe,
    ProjectHookServiceProbe,
)

__all__ = [
    "DefaultProjectHookServiceProbe",
    "ProjectHookServiceProbe",
]
