"""Domain-Oriented Observability for hooks infrastructure."""

from hooks.infrastructure.observability.repository_probe import (
    DefaultProjectHookRepositoryProbe,
    ProjectHookRepositoryProbe,
)

__all__ = [
    "DefaultProjectHookRepositoryProbe",
    "ProjectHookRepositoryProbe",
]
