"""Application services for the membership bounded context."""

from membership.application.services.group_service import GroupService
from membership.application.services.membership_resolver import MembershipResolver
from membership.application.services.two_factor_service import TwoFactorService

__all__ = [
    "GroupService",
    "MembershipResolver",
    "TwoFactorService",
]
