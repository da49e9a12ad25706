"""Domain-Oriented Observability for the membership domain layer.

Probes for domain aggregate operations following Domain-Oriented Observability patterns.
"""

from membership.domain.observability.group_probe import (
    DefaultGroupProbe,
    GroupProbe,
)

__all__ = [
    "DefaultGroupProbe",
    "GroupProbe",
]
