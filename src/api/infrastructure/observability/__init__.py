"""Domain-oriented observability infrastructure.

Probes throughout the service accept an ObservationContext so that every
structured log line can carry request-scoped metadata.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from infrastructure.observability.context import ObservationContext
from infrastructure.observability.probes import DatabaseProbe, DefaultDatabaseProbe

__all__ = [
    "DatabaseProbe",
    "DefaultDatabaseProbe",
    "ObservationContext",
]
