"""Application-layer observability probes for the membership context."""

from membership.application.observability.group_service_probe import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)
from membership.application.observability.membership_resolver_probe import (
    DefaultMembershipResolverProbe,
    MembershipResolverProbe,
)
from membership.application.observability.two_factor_service_probe import (
    DefaultTwoFactorServiceProbe,
    TwoFactorServiceProbe,
)

__all__ = [
    "DefaultGroupServiceProbe",
    "DefaultMembershipResolverProbe",
    "DefaultTwoFactorServiceProbe",
    "GroupServiceProbe",
    "MembershipResolverProbe",
    "TwoFactorServiceProbe",
]
