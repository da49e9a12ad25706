"""Domain-Oriented Observability for membership infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from membership.infrastructure.observability.repository_probe import (
    DefaultGroupRepositoryProbe,
    DefaultProjectRepositoryProbe,
    DefaultUserRepositoryProbe,
    GroupRepositoryProbe,
    ProjectRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "GroupRepositoryProbe",
    "DefaultGroupRepositoryProbe",
    "UserRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "ProjectRepositoryProbe",
    "DefaultProjectRepositoryProbe",
]
