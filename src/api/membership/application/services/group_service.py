"""Group application service for the membership bounded context.

Orchestrates group lifecycle, membership and variable management. Every
permission decision is delegated to the MembershipResolver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession

from membership.application.observability import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)
from membership.application.services.membership_resolver import MembershipResolver
from membership.application.value_objects import (
    GroupUpdateResult,
    TwoFactorCascadeResult,
)
from membership.domain.aggregates import Group
from membership.domain.events import (
    MemberAdded,
    MemberRemoved,
    TwoFactorRequirementChanged,
)
from membership.domain.exceptions import GroupValidationError
from membership.domain.hierarchy import MAX_NESTING_DEPTH, AncestorChain
from membership.domain.value_objects import (
    AccessLevel,
    GroupId,
    Membership,
    SecretVariable,
    UserId,
    Visibility,
)
from membership.ports.exceptions import GroupNotFoundError, UserNotFoundError
from membership.ports.repositories import IGroupRepository, IUserRepository

if TYPE_CHECKING:
    from infrastructure.settings import MembershipSettings
    from membership.application.services.two_factor_service import (
        TwoFactorService,
    )


class GroupService:
    """Application service for group management.

    Administrative operations (settings, members, variables, deletion)
    require Owner access on the group, inherited access included. Manages
    database transactions; domain events collected after a commit are
    dispatched once the transaction is closed.
    """

    def __init__(
        self,
        session: AsyncSession,
        group_repository: IGroupRepository,
        user_repository: IUserRepository,
        resolver: MembershipResolver,
        settings: MembershipSettings,
        two_factor_service: TwoFactorService | None = None,
        probe: GroupServiceProbe | None = None,
    ):
        """Initialize GroupService with dependencies.

        Args:
            session: Database session for transaction management
            group_repository: Repository for group persistence
            user_repository: Repository used to check users exist
            resolver: The single source of access decisions
            settings: URL settings for web and avatar links
            two_factor_service: Processes two-factor policy changes after
                commit. When omitted, affected users are only returned.
            probe: Optional domain probe for observability
        """
        self._session = session
        self._group_repository = group_repository
        self._user_repository = user_repository
        self._resolver = resolver
        self._settings = settings
        self._two_factor_service = two_factor_service
        self._probe = probe or DefaultGroupServiceProbe()

    async def create_group(
        self,
        name: str,
        path: str,
        creator_id: UserId,
        parent_id: GroupId | None = None,
        **attributes: Any,
    ) -> Group:
        """Create a group with the creator as its owner.

        Creating a subgroup requires Owner access on the parent. Chains are
        limited to MAX_NESTING_DEPTH groups.

        Args:
            name: Group name
            path: Group path, unique among siblings
            creator_id: ID of user creating the group
            parent_id: Parent group for a nested group
            **attributes: Other group attributes (visibility, description...)

        Returns:
            The created Group aggregate

        Raises:
            GroupValidationError: If attributes are invalid
            DuplicateGroupPathError: If a sibling already uses the path
            DuplicateGroupNameError: If a sibling already uses the name
            UnauthorizedError: If the creator cannot create subgroups there
        """
        try:
            async with self._session.begin():
                if parent_id is not None:
                    parent_chain = await self._resolver.require_access(
                        parent_id, creator_id, AccessLevel.OWNER
                    )
                    if len(parent_chain.groups) >= MAX_NESTING_DEPTH:
                        raise GroupValidationError(
                            {"parent_id": ["has too deep level of nesting"]}
                        )

                group = Group.create(
                    name=name, path=path, parent_id=parent_id, **attributes
                )
                group.add_owner(creator_id)
                await self._group_repository.save(group)

            group.collect_events()
            self._probe.group_created(
                group_id=group.id.value,
                path=path,
                parent_id=parent_id.value if parent_id else None,
                creator_id=creator_id.value,
            )
            return group

        except Exception as e:
            self._probe.group_creation_failed(
                path=path,
                parent_id=parent_id.value if parent_id else None,
                error=str(e),
            )
            raise

    async def get_group(self, group_id: GroupId) -> Group | None:
        """Get a group by ID, or None if not found."""
        return await self._group_repository.get_by_id(group_id)

    async def update_group(
        self,
        group_id: GroupId,
        acting_user_id: UserId,
        **attributes: Any,
    ) -> GroupUpdateResult:
        """Update group attributes.

        A change to require_two_factor_authentication or
        two_factor_grace_period makes the two-factor requirement of every
        active member of the group and of its subgroups stale. Those users
        are returned and, when a TwoFactorService is configured, recomputed
        after the update commits.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            GroupValidationError: If the new values are invalid
            DuplicateGroupPathError: If a sibling already uses the new path
            DuplicateGroupNameError: If a sibling already uses the new name
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            group = chain.group
            policy = _two_factor_policy(group)
            affected = group.update(**attributes)
            await self._group_repository.save(group)

            if _two_factor_policy(group) != policy:
                subtree = await self._group_repository.list_member_ids_in_subtree(
                    group_id
                )
                affected = list(dict.fromkeys([*affected, *subtree]))

        self._probe.group_updated(
            group_id=group_id.value,
            fields=sorted(attributes),
            affected_user_count=len(affected),
        )
        cascade = await self._dispatch_events(group, user_ids=affected)
        return GroupUpdateResult(
            group=group,
            affected_user_ids=tuple(affected),
            cascade=cascade,
        )

    async def delete_group(self, group_id: GroupId, acting_user_id: UserId) -> bool:
        """Delete a group with its memberships, variables and subgroups.

        Returns:
            True if deleted, False if not found

        Raises:
            UnauthorizedError: If the acting user is not an owner
        """
        async with self._session.begin():
            try:
                chain = await self._resolver.require_access(
                    group_id, acting_user_id, AccessLevel.OWNER
                )
            except GroupNotFoundError:
                return False

            group = chain.group
            group.mark_for_deletion()
            deleted = await self._group_repository.delete(group)

        group.collect_events()
        self._probe.group_deleted(group_id.value, member_count=len(group.memberships))
        return deleted

    async def add_user(
        self,
        group_id: GroupId,
        acting_user_id: UserId,
        user_id: UserId,
        access_level: AccessLevel,
    ) -> Membership:
        """Grant a user membership at a level, replacing any previous level.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            UserNotFoundError: If the user does not exist
        """
        memberships = await self.add_users(
            group_id, acting_user_id, [user_id], access_level
        )
        return memberships[0]

    async def add_users(
        self,
        group_id: GroupId,
        acting_user_id: UserId,
        user_ids: list[UserId],
        access_level: AccessLevel,
    ) -> list[Membership]:
        """Grant several users membership at the same level.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            UserNotFoundError: If any user does not exist (nothing is saved)
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            for user_id in user_ids:
                await self._ensure_user_exists(user_id)

            group = chain.group
            memberships = group.add_users(user_ids, access_level)
            await self._group_repository.save(group)

        await self._dispatch_events(group, chain)
        self._probe.members_added(
            group_id=group_id.value,
            user_count=len(memberships),
            access_level=int(access_level),
        )
        return memberships

    async def request_access(self, group_id: GroupId, user_id: UserId) -> Membership:
        """Record a user's request to join a group.

        Raises:
            GroupNotFoundError: If the group does not exist
            UserNotFoundError: If the user does not exist
            AccessRequestsDisabledError: If the group does not accept requests
        """
        async with self._session.begin():
            group = await self._require_group(group_id)
            await self._ensure_user_exists(user_id)
            membership = group.request_access(user_id)
            await self._group_repository.save(group)

        await self._dispatch_events(group)
        return membership

    async def approve_access_request(
        self,
        group_id: GroupId,
        acting_user_id: UserId,
        user_id: UserId,
        access_level: AccessLevel = AccessLevel.DEVELOPER,
    ) -> Membership:
        """Accept a pending request at the given level.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            ValueError: If the user has no pending request
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            group = chain.group
            membership = group.approve_access_request(user_id, access_level)
            await self._group_repository.save(group)

        await self._dispatch_events(group, chain)
        return membership

    async def deny_access_request(
        self, group_id: GroupId, acting_user_id: UserId, user_id: UserId
    ) -> None:
        """Drop a pending request.

        Users may withdraw their own request; otherwise Owner access is needed.
        """
        async with self._session.begin():
            if acting_user_id == user_id:
                group = await self._require_group(group_id)
            else:
                chain = await self._resolver.require_access(
                    group_id, acting_user_id, AccessLevel.OWNER
                )
                group = chain.group
            group.deny_access_request(user_id)
            await self._group_repository.save(group)

        await self._dispatch_events(group)

    async def remove_member(
        self, group_id: GroupId, acting_user_id: UserId, user_id: UserId
    ) -> None:
        """Remove a user's direct membership.

        Members may leave on their own; removing someone else requires
        Owner access.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            ValueError: If the user is not a member or is the last owner
        """
        async with self._session.begin():
            if acting_user_id == user_id:
                chain = await self._require_chain(group_id)
            else:
                chain = await self._resolver.require_access(
                    group_id, acting_user_id, AccessLevel.OWNER
                )
            group = chain.group
            group.remove_member(user_id)
            await self._group_repository.save(group)

        await self._dispatch_events(group, chain)

    async def add_variable(
        self,
        group_id: GroupId,
        acting_user_id: UserId,
        key: str,
        value: str,
        protected: bool = False,
    ) -> SecretVariable:
        """Create a secret variable on the group.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            ValueError: If the key is malformed or already used
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            group = chain.group
            variable = group.add_variable(key, value, protected=protected)
            await self._group_repository.save(group)

        self._probe.variable_changed(
            group_id=group_id.value, key=key, protected=protected, action="added"
        )
        return variable

    async def remove_variable(
        self, group_id: GroupId, acting_user_id: UserId, key: str
    ) -> SecretVariable:
        """Delete a secret variable from the group.

        Raises:
            GroupNotFoundError: If the group does not exist
            UnauthorizedError: If the acting user is not an owner
            ValueError: If no variable has that key
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            group = chain.group
            variable = group.remove_variable(key)
            await self._group_repository.save(group)

        self._probe.variable_changed(
            group_id=group_id.value,
            key=key,
            protected=variable.protected,
            action="removed",
        )
        return variable

    async def set_avatar(
        self, group_id: GroupId, acting_user_id: UserId, filename: str | None
    ) -> Group:
        """Attach an avatar image by filename (storage happens elsewhere).

        Raises:
            GroupValidationError: If the file is not an image
        """
        async with self._session.begin():
            chain = await self._resolver.require_access(
                group_id, acting_user_id, AccessLevel.OWNER
            )
            group = chain.group
            group.set_avatar(filename)
            await self._group_repository.save(group)

        return group

    async def avatar_url(self, group_id: GroupId, only_path: bool = True) -> str | None:
        """Avatar URL of a group, or None without group or avatar."""
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            return None
        return group.avatar_url(
            base_url=self._settings.base_url,
            asset_host=self._settings.asset_host,
            only_path=only_path,
        )

    async def web_url(self, group_id: GroupId) -> str | None:
        """Canonical URL of a group, built from its full path."""
        chain = await self._resolver.ancestor_chain(group_id)
        if chain is None:
            return None
        return f"{self._settings.base_url}/groups/{chain.full_path}"

    async def search(self, query: str) -> list[Group]:
        """Groups whose name or path contains the query, ignoring case."""
        if not query:
            return []
        return await self._group_repository.search(query)

    async def public_only(self) -> list[Group]:
        """Public groups."""
        return await self._group_repository.list_by_visibility([Visibility.PUBLIC])

    async def public_and_internal_only(self) -> list[Group]:
        """Public and internal groups."""
        return await self._group_repository.list_by_visibility(
            [Visibility.PUBLIC, Visibility.INTERNAL]
        )

    async def non_public_only(self) -> list[Group]:
        """Private and internal groups."""
        return await self._group_repository.list_by_visibility(
            [Visibility.PRIVATE, Visibility.INTERNAL]
        )

    async def visible_to_user(self, user_id: UserId) -> list[Group]:
        """Groups the user is an active direct member of."""
        return await self._group_repository.list_for_member(user_id)

    async def _require_group(self, group_id: GroupId) -> Group:
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            raise GroupNotFoundError(f"Group {group_id.value} not found")
        return group

    async def _require_chain(self, group_id: GroupId) -> AncestorChain:
        chain = await self._resolver.ancestor_chain(group_id)
        if chain is None:
            raise GroupNotFoundError(f"Group {group_id.value} not found")
        return chain

    async def _ensure_user_exists(self, user_id: UserId) -> None:
        if await self._user_repository.get_by_id(user_id) is None:
            raise UserNotFoundError(f"User {user_id.value} not found")

    async def _dispatch_events(
        self,
        group: Group,
        chain: AncestorChain | None = None,
        user_ids: list[UserId] | None = None,
    ) -> TwoFactorCascadeResult | None:
        """Handle events recorded by a committed change.

        Two-factor requirements are recomputed for the given users, for the
        users named by a policy change, and for users who joined or left the
        group while it or an ancestor enforces two-factor.
        """
        enforced = chain is not None and chain.requires_two_factor
        pending = list(user_ids or [])
        for event in group.collect_events():
            if isinstance(event, TwoFactorRequirementChanged):
                pending.extend(UserId(value=user_id) for user_id in event.user_ids)
            elif enforced and isinstance(event, (MemberAdded, MemberRemoved)):
                pending.append(UserId(value=event.user_id))

        affected = list(dict.fromkeys(pending))
        if not affected or self._two_factor_service is None:
            return None
        return await self._two_factor_service.recompute(affected)


def _two_factor_policy(group: Group) -> tuple[bool, int | None]:
    return (
        group.require_two_factor_authentication,
        group.two_factor_grace_period,
    )
