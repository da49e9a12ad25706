"""Membership resolver for the membership bounded context.

Answers every "who can do what on this group" question. Inherited access,
role predicates and secret-variable visibility are all computed here over
one ancestor-chain snapshot, and every other service asks the resolver
instead of checking memberships itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from membership.application.observability import (
    DefaultMembershipResolverProbe,
    MembershipResolverProbe,
)
from membership.domain.aggregates import Group, Project
from membership.domain.hierarchy import AncestorChain
from membership.domain.value_objects import (
    AccessLevel,
    BranchProtection,
    GroupId,
    Membership,
    SecretVariable,
    UserId,
)
from membership.ports.exceptions import GroupNotFoundError, UnauthorizedError
from membership.ports.repositories import IGroupRepository

if TYPE_CHECKING:
    from infrastructure.settings import MembershipSettings


class MembershipResolver:
    """Resolves effective access, member listings and visible variables.

    The resolver never opens transactions of its own: it reads through the
    repository's session, so a caller that wraps several calls in one
    transaction gets answers from one snapshot.
    """

    def __init__(
        self,
        group_repository: IGroupRepository,
        settings: MembershipSettings,
        probe: MembershipResolverProbe | None = None,
    ):
        """Initialize the resolver.

        Args:
            group_repository: Repository providing groups and ancestor chains
            settings: Instance-wide LFS and branch protection policy
            probe: Optional domain probe for observability
        """
        self._group_repository = group_repository
        self._settings = settings
        self._probe = probe or DefaultMembershipResolverProbe()

    async def ancestor_chain(self, group_id: GroupId) -> AncestorChain | None:
        """Load a group and its ancestors as one snapshot.

        Returns:
            The chain, or None if the group does not exist
        """
        groups = await self._group_repository.get_ancestors(group_id)
        if not groups:
            self._probe.group_not_found(group_id.value)
            return None

        chain = AncestorChain.build(group_id, groups)
        self._probe.chain_loaded(group_id.value, depth=len(chain.groups))
        return chain

    async def effective_access_level(
        self, group_id: GroupId, user_id: UserId
    ) -> AccessLevel | None:
        """Highest level the user holds on the group or any ancestor.

        Returns:
            The level, or None without any active membership on the chain
            (or when the group does not exist)
        """
        chain = await self.ancestor_chain(group_id)
        if chain is None:
            return None
        return chain.effective_access_level(user_id)

    async def has_access_at_least(
        self, group_id: GroupId, user_id: UserId, access_level: AccessLevel
    ) -> bool:
        """Check the user's effective level against a minimum."""
        effective = await self.effective_access_level(group_id, user_id)
        return effective is not None and effective >= access_level

    async def has_owner(self, group_id: GroupId, user_id: UserId) -> bool:
        """Check whether the user's effective level is exactly Owner."""
        return await self.effective_access_level(group_id, user_id) == AccessLevel.OWNER

    async def has_master(self, group_id: GroupId, user_id: UserId) -> bool:
        """Check whether the user's effective level is exactly Master.

        Owners are not reported as masters.
        """
        return (
            await self.effective_access_level(group_id, user_id) == AccessLevel.MASTER
        )

    async def require_access(
        self, group_id: GroupId, user_id: UserId, access_level: AccessLevel
    ) -> AncestorChain:
        """Ensure the user holds at least access_level on the group.

        Returns:
            The chain the decision was made on, for callers that continue
            working with the same snapshot

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the user's effective level is too low
        """
        chain = await self.ancestor_chain(group_id)
        if chain is None:
            raise GroupNotFoundError(f"Group {group_id.value} not found")

        if not chain.has_access_at_least(user_id, access_level):
            effective = chain.effective_access_level(user_id)
            self._probe.access_denied(
                group_id=group_id.value,
                user_id=user_id.value,
                required_level=int(access_level),
                effective_level=int(effective) if effective is not None else None,
            )
            raise UnauthorizedError(
                f"User {user_id.value} needs {access_level.label} access "
                f"on group {group_id.value}"
            )
        return chain

    async def members(self, group_id: GroupId) -> list[Membership]:
        """Active memberships held directly on the group."""
        group = await self._get_group(group_id)
        return group.members() if group else []

    async def requesters(self, group_id: GroupId) -> list[Membership]:
        """Pending access requests held directly on the group."""
        group = await self._get_group(group_id)
        return group.requesters() if group else []

    async def owners(self, group_id: GroupId) -> list[UserId]:
        """Users with an active direct Owner membership."""
        group = await self._get_group(group_id)
        return group.owners() if group else []

    async def users(self, group_id: GroupId) -> list[UserId]:
        """The group's users, defined as its owners."""
        return await self.owners(group_id)

    async def members_with_parents(self, group_id: GroupId) -> list[Membership]:
        """Active memberships on the group and all ancestors, nearest first."""
        chain = await self.ancestor_chain(group_id)
        return chain.members_with_parents() if chain else []

    async def user_ids_for_project_authorizations(
        self, group_id: GroupId
    ) -> list[UserId]:
        """Users whose project authorizations must be refreshed for the group."""
        chain = await self.ancestor_chain(group_id)
        return chain.user_ids_for_project_authorizations() if chain else []

    async def secret_variables_for(
        self, group_id: GroupId, ref: str, project: Project
    ) -> list[SecretVariable]:
        """Variables visible to a project's ref, most specific group first.

        Args:
            group_id: The group whose chain provides the variables
            ref: Branch or tag name
            project: The project the ref belongs to

        Returns:
            The group's own variables, then each ancestor's, nearest first.
            Protected variables are present only for protected refs.
        """
        chain = await self.ancestor_chain(group_id)
        if chain is None:
            return []

        protection = BranchProtection(self._settings.default_branch_protection)
        variables = chain.secret_variables_for(ref, project, protection)
        self._probe.secret_variables_resolved(
            group_id=group_id.value,
            project_id=project.id.value,
            protected_ref=project.is_protected_ref(ref, protection),
            count=len(variables),
        )
        return variables

    async def lfs_enabled(self, group_id: GroupId) -> bool:
        """Resolve the group's LFS flag against the global switch."""
        group = await self._get_group(group_id)
        if group is None:
            return False
        return group.lfs_enabled_with(self._settings.lfs_enabled)

    async def _get_group(self, group_id: GroupId) -> Group | None:
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            self._probe.group_not_found(group_id.value)
        return group
