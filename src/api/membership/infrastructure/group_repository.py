"""PostgreSQL implementation of IGroupRepository.

Groups are stored with their direct memberships and secret variables in
separate tables and reconstituted as complete Group aggregates. Ancestor
chains are read with a single recursive query so that one statement sees
one snapshot of the hierarchy.
"""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import func, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from membership.domain.aggregates import Group
from membership.domain.hierarchy import MAX_NESTING_DEPTH
from membership.domain.value_objects import (
    AccessLevel,
    GroupId,
    Membership,
    MembershipState,
    SecretVariable,
    UserId,
    VariableId,
    Visibility,
)
from membership.infrastructure.models import (
    GroupMemberModel,
    GroupModel,
    GroupVariableModel,
)
from membership.infrastructure.observability import (
    DefaultGroupRepositoryProbe,
    GroupRepositoryProbe,
)
from membership.ports.exceptions import (
    DuplicateGroupNameError,
    DuplicateGroupPathError,
)
from membership.ports.repositories import IGroupRepository


class GroupRepository(IGroupRepository):
    """PostgreSQL-backed repository for Group aggregates.

    The repository never commits: callers own the transaction, so a save
    and the reads that preceded it share one unit of work. Domain events
    are left on the aggregate for the application service to collect.
    """

    def __init__(
        self, session: AsyncSession, probe: GroupRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession owned by the caller
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultGroupRepositoryProbe()

    async def save(self, group: Group) -> None:
        """Persist group attributes, memberships and variables.

        Args:
            group: The Group aggregate to persist

        Raises:
            DuplicateGroupPathError: If a sibling already uses the path
            DuplicateGroupNameError: If a sibling already uses the name
        """
        parent_value = group.parent_id.value if group.parent_id else None

        existing = await self.get_by_path(group.path, group.parent_id)
        if existing and existing.id != group.id:
            self._probe.duplicate_group_path(group.path, parent_value)
            raise DuplicateGroupPathError(
                f"Path '{group.path}' is already taken in this namespace"
            )

        existing = await self.get_by_name(group.name, group.parent_id)
        if existing and existing.id != group.id:
            self._probe.duplicate_group_name(group.name, parent_value)
            raise DuplicateGroupNameError(
                f"Name '{group.name}' is already taken in this namespace"
            )

        try:
            stmt = select(GroupModel).where(GroupModel.id == group.id.value)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

            if model is None:
                model = GroupModel(id=group.id.value)
                self._session.add(model)

            model.parent_id = parent_value
            model.name = group.name
            model.path = group.path
            model.description = group.description
            model.visibility_level = int(group.visibility)
            model.avatar = group.avatar
            model.require_two_factor_authentication = (
                group.require_two_factor_authentication
            )
            model.two_factor_grace_period = group.two_factor_grace_period
            model.lfs_enabled = group.lfs_enabled
            model.request_access_enabled = group.request_access_enabled

            # The group row must exist before rows referencing it
            await self._session.flush()

            await self._sync_members(group)
            await self._sync_variables(group)
            await self._session.flush()

        except IntegrityError as e:
            constraint = _constraint_name(str(e))
            if constraint.endswith("_path"):
                self._probe.duplicate_group_path(group.path, parent_value)
                raise DuplicateGroupPathError(
                    f"Path '{group.path}' is already taken in this namespace"
                ) from e
            if constraint.endswith("_name"):
                self._probe.duplicate_group_name(group.name, parent_value)
                raise DuplicateGroupNameError(
                    f"Name '{group.name}' is already taken in this namespace"
                ) from e
            raise

        self._probe.group_saved(group.id.value, len(group.memberships))

    async def get_by_id(self, group_id: GroupId) -> Group | None:
        """Retrieve a group by its ID.

        Args:
            group_id: The unique identifier of the group

        Returns:
            The Group aggregate with memberships and variables, or None
        """
        stmt = select(GroupModel).where(GroupModel.id == group_id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.group_not_found(group_id.value)
            return None

        group = (await self._hydrate([model]))[0]
        self._probe.group_retrieved(group.id.value, len(group.memberships))
        return group

    async def get_ancestors(self, group_id: GroupId) -> list[Group]:
        """Retrieve a group followed by its ancestors, nearest first.

        Args:
            group_id: The group to start from

        Returns:
            The chain of hydrated groups, or an empty list if not found
        """
        chain = (
            select(
                GroupModel.id,
                GroupModel.parent_id,
                literal(0).label("depth"),
            )
            .where(GroupModel.id == group_id.value)
            .cte("ancestors", recursive=True)
        )
        parent = aliased(GroupModel)
        chain = chain.union_all(
            select(
                parent.id,
                parent.parent_id,
                (chain.c.depth + 1).label("depth"),
            ).where(
                parent.id == chain.c.parent_id,
                chain.c.depth < MAX_NESTING_DEPTH,
            )
        )

        stmt = (
            select(GroupModel)
            .join(chain, GroupModel.id == chain.c.id)
            .order_by(chain.c.depth)
        )
        result = await self._session.execute(stmt)
        models = list(result.scalars().all())

        if not models:
            self._probe.group_not_found(group_id.value)
            return []

        groups = await self._hydrate(models)
        self._probe.ancestors_retrieved(group_id.value, depth=len(groups))
        return groups

    async def get_by_path(self, path: str, parent_id: GroupId | None) -> Group | None:
        """Retrieve a sibling by path; paths compare case-insensitively."""
        stmt = select(GroupModel).where(
            func.lower(GroupModel.path) == path.lower(),
            self._parent_clause(parent_id),
        )
        return await self._first(stmt)

    async def get_by_name(self, name: str, parent_id: GroupId | None) -> Group | None:
        """Retrieve a sibling by exact name."""
        stmt = select(GroupModel).where(
            GroupModel.name == name,
            self._parent_clause(parent_id),
        )
        return await self._first(stmt)

    async def search(self, query: str) -> list[Group]:
        """Groups whose name or path contains query, ignoring case.

        ``%`` and ``_`` in the query match literally.
        """
        stmt = (
            select(GroupModel)
            .where(
                GroupModel.name.icontains(query, autoescape=True)
                | GroupModel.path.icontains(query, autoescape=True)
            )
            .order_by(GroupModel.name)
        )
        return await self._all(stmt)

    async def list_by_visibility(self, levels: list[Visibility]) -> list[Group]:
        """Groups with one of the given visibility levels."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.visibility_level.in_([int(level) for level in levels]))
            .order_by(GroupModel.name)
        )
        return await self._all(stmt)

    async def list_for_member(self, user_id: UserId) -> list[Group]:
        """Groups where the user holds an active direct membership."""
        stmt = (
            select(GroupModel)
            .join(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(
                GroupMemberModel.user_id == user_id.value,
                GroupMemberModel.state == MembershipState.ACTIVE.value,
            )
            .order_by(GroupModel.name)
        )
        return await self._all(stmt)

    async def list_two_factor_groups_for_user(self, user_id: UserId) -> list[Group]:
        """Groups requiring two-factor among the user's groups and their ancestors.

        Membership in a subgroup makes the user subject to the policy of
        every group above it.
        """
        member_groups = select(GroupMemberModel.group_id).where(
            GroupMemberModel.user_id == user_id.value,
            GroupMemberModel.state == MembershipState.ACTIVE.value,
        )
        tree = (
            select(GroupModel.id, GroupModel.parent_id)
            .where(GroupModel.id.in_(member_groups))
            .cte("member_tree", recursive=True)
        )
        parent = aliased(GroupModel)
        tree = tree.union(
            select(parent.id, parent.parent_id).join(
                tree, parent.id == tree.c.parent_id
            )
        )

        stmt = select(GroupModel).where(
            GroupModel.id.in_(select(tree.c.id)),
            GroupModel.require_two_factor_authentication.is_(True),
        )
        return await self._all(stmt)

    async def list_member_ids_in_subtree(self, group_id: GroupId) -> list[UserId]:
        """Active members of the group and of every group below it.

        These are the users whose derived two-factor requirement depends on
        the group's policy.
        """
        subtree = (
            select(GroupModel.id, literal(0).label("depth"))
            .where(GroupModel.id == group_id.value)
            .cte("subtree", recursive=True)
        )
        child = aliased(GroupModel)
        subtree = subtree.union_all(
            select(child.id, (subtree.c.depth + 1).label("depth")).where(
                child.parent_id == subtree.c.id,
                subtree.c.depth < MAX_NESTING_DEPTH,
            )
        )

        stmt = (
            select(GroupMemberModel.user_id)
            .where(
                GroupMemberModel.group_id.in_(select(subtree.c.id)),
                GroupMemberModel.state == MembershipState.ACTIVE.value,
            )
            .distinct()
            .order_by(GroupMemberModel.user_id)
        )
        result = await self._session.execute(stmt)
        return [UserId(value=user_id) for user_id in result.scalars().all()]

    async def delete(self, group: Group) -> bool:
        """Delete a group; the database cascades to members, variables and subgroups.

        Args:
            group: The group to delete

        Returns:
            True if deleted, False if not found
        """
        stmt = select(GroupModel).where(GroupModel.id == group.id.value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.group_not_found(group.id.value)
            return False

        await self._session.delete(model)
        await self._session.flush()

        self._probe.group_deleted(group.id.value)
        return True

    @staticmethod
    def _parent_clause(parent_id: GroupId | None):
        if parent_id is None:
            return GroupModel.parent_id.is_(None)
        return GroupModel.parent_id == parent_id.value

    async def _first(self, stmt) -> Group | None:
        result = await self._session.execute(stmt.limit(1))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return (await self._hydrate([model]))[0]

    async def _all(self, stmt) -> list[Group]:
        result = await self._session.execute(stmt)
        return await self._hydrate(list(result.scalars().all()))

    async def _hydrate(self, models: list[GroupModel]) -> list[Group]:
        """Load memberships and variables for the models in two queries."""
        if not models:
            return []

        ids = list({model.id for model in models})

        members_result = await self._session.execute(
            select(GroupMemberModel).where(GroupMemberModel.group_id.in_(ids))
        )
        members_by_group: dict[str, list[Membership]] = defaultdict(list)
        for row in members_result.scalars().all():
            members_by_group[row.group_id].append(
                Membership(
                    user_id=UserId(value=row.user_id),
                    access_level=AccessLevel(row.access_level),
                    state=MembershipState(row.state),
                    requested_at=row.requested_at,
                )
            )

        variables_result = await self._session.execute(
            select(GroupVariableModel).where(GroupVariableModel.group_id.in_(ids))
        )
        variables_by_group: dict[str, list[SecretVariable]] = defaultdict(list)
        for row in variables_result.scalars().all():
            variables_by_group[row.group_id].append(
                SecretVariable(
                    id=VariableId(value=row.id),
                    group_id=GroupId(value=row.group_id),
                    key=row.key,
                    value=row.value,
                    protected=row.protected,
                )
            )

        return [
            Group(
                id=GroupId(value=model.id),
                name=model.name,
                path=model.path,
                parent_id=GroupId(value=model.parent_id) if model.parent_id else None,
                visibility=Visibility(model.visibility_level),
                description=model.description,
                avatar=model.avatar,
                require_two_factor_authentication=(
                    model.require_two_factor_authentication
                ),
                two_factor_grace_period=model.two_factor_grace_period,
                lfs_enabled=model.lfs_enabled,
                request_access_enabled=model.request_access_enabled,
                memberships=members_by_group[model.id],
                variables=variables_by_group[model.id],
            )
            for model in models
        ]

    async def _sync_members(self, group: Group) -> None:
        """Make the group_members rows match the aggregate's memberships."""
        result = await self._session.execute(
            select(GroupMemberModel).where(GroupMemberModel.group_id == group.id.value)
        )
        current = {row.user_id: row for row in result.scalars().all()}
        desired = {m.user_id.value: m for m in group.memberships}

        for user_id, row in current.items():
            if user_id not in desired:
                await self._session.delete(row)

        for user_id, membership in desired.items():
            row = current.get(user_id)
            if row is None:
                row = GroupMemberModel(group_id=group.id.value, user_id=user_id)
                self._session.add(row)
            row.access_level = int(membership.access_level)
            row.state = membership.state.value
            row.requested_at = membership.requested_at

    async def _sync_variables(self, group: Group) -> None:
        """Make the group_variables rows match the aggregate's variables."""
        result = await self._session.execute(
            select(GroupVariableModel).where(
                GroupVariableModel.group_id == group.id.value
            )
        )
        current = {row.id: row for row in result.scalars().all()}
        desired = {v.id.value: v for v in group.variables}

        for variable_id, row in current.items():
            if variable_id not in desired:
                await self._session.delete(row)

        for variable_id, variable in desired.items():
            row = current.get(variable_id)
            if row is None:
                row = GroupVariableModel(id=variable_id, group_id=group.id.value)
                self._session.add(row)
            row.key = variable.key
            row.value = variable.value
            row.protected = variable.protected


def _constraint_name(message: str) -> str:
    """Name of the groups unique constraint an IntegrityError reports, or ""."""
    for name in (
        "uq_groups_parent_id_path",
        "uq_groups_top_level_path",
        "uq_groups_parent_id_name",
        "uq_groups_top_level_name",
    ):
        if name in message:
            return name
    return ""
