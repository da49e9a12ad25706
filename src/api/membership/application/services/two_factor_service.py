"""Two-factor requirement recomputation for the membership context.

When a group changes its two-factor policy, every active member's derived
requirement must be recomputed. The group update commits first; this
service then processes the affected users one transaction at a time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from membership.application.observability import (
    DefaultTwoFactorServiceProbe,
    TwoFactorServiceProbe,
)
from membership.application.value_objects import TwoFactorCascadeResult
from membership.domain.value_objects import UserId
from membership.ports.exceptions import UserNotFoundError
from membership.ports.repositories import IGroupRepository, IUserRepository

if TYPE_CHECKING:
    from infrastructure.settings import MembershipSettings


class TwoFactorService:
    """Recomputes users' two-factor requirements from their groups.

    Each user is recomputed exactly once per call, in their own
    transaction. A failure for one user is retried up to the configured
    number of attempts and then reported, without affecting the others.
    The computation is derived from current group state, so retrying a
    user (or replaying a whole batch) never applies anything twice.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repository: IUserRepository,
        group_repository: IGroupRepository,
        settings: MembershipSettings,
        probe: TwoFactorServiceProbe | None = None,
    ):
        """Initialize TwoFactorService with dependencies.

        Args:
            session: Database session for per-user transactions
            user_repository: Repository for user persistence
            group_repository: Repository providing the user's groups
            settings: Grace period default and retry budget
            probe: Optional domain probe for observability
        """
        self._session = session
        self._user_repository = user_repository
        self._group_repository = group_repository
        self._settings = settings
        self._probe = probe or DefaultTwoFactorServiceProbe()

    async def recompute(self, user_ids: Iterable[UserId]) -> TwoFactorCascadeResult:
        """Recompute the requirement of every listed user.

        Args:
            user_ids: Users to recompute; duplicates are processed once

        Returns:
            Which users changed, which were already up to date, which failed
        """
        unique_ids = list(dict.fromkeys(user_ids))
        self._probe.recompute_started(len(unique_ids))

        updated: list[UserId] = []
        unchanged: list[UserId] = []
        failed: list[UserId] = []

        for user_id in unique_ids:
            outcome = await self._recompute_with_retries(user_id)
            if outcome is None:
                failed.append(user_id)
            elif outcome:
                updated.append(user_id)
            else:
                unchanged.append(user_id)

        self._probe.recompute_finished(
            updated=len(updated), unchanged=len(unchanged), failed=len(failed)
        )
        return TwoFactorCascadeResult(
            updated=tuple(updated),
            unchanged=tuple(unchanged),
            failed=tuple(failed),
        )

    async def _recompute_with_retries(self, user_id: UserId) -> bool | None:
        """Recompute one user.

        Returns:
            Whether the user changed, or None when every attempt failed
        """
        max_attempts = self._settings.two_factor_cascade_max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                changed = await self._recompute_user(user_id)
            except UserNotFoundError as e:
                self._probe.user_recompute_failed(user_id.value, str(e))
                return None
            except Exception as e:
                if attempt == max_attempts:
                    self._probe.user_recompute_failed(user_id.value, str(e))
                    return None
                self._probe.user_recompute_retrying(user_id.value, attempt, str(e))
            else:
                self._probe.user_recomputed(user_id.value, changed)
                return changed

        return None

    async def _recompute_user(self, user_id: UserId) -> bool:
        async with self._session.begin():
            user = await self._user_repository.get_by_id(user_id)
            if user is None:
                raise UserNotFoundError(f"User {user_id.value} not found")

            groups = await self._group_repository.list_two_factor_groups_for_user(
                user_id
            )
            changed = user.update_two_factor_requirement(
                groups,
                default_grace_period=self._settings.two_factor_grace_period_default,
            )
            if changed:
                await self._user_repository.save(user)

        return changed
