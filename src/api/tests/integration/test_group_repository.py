"""Integration tests for GroupRepository.

These tests require PostgreSQL to be running.
They exercise the recursive hierarchy queries against a real database.
"""

import pytest

from membership.domain.aggregates import Group, User
from membership.domain.value_objects import AccessLevel, UserId
from membership.infrastructure.group_repository import GroupRepository
from membership.infrastructure.user_repository import UserRepository
from membership.ports.exceptions import DuplicateGroupPathError

pytestmark = pytest.mark.integration


async def _save_user(user_repository: UserRepository, async_session) -> User:
    user = User(id=UserId.generate(), username=f"user-{UserId.generate().value}")
    async with async_session.begin():
        await user_repository.save(user)
    return user


class TestGroupRoundTrip:
    """Tests for save and retrieve operations."""

    @pytest.mark.asyncio
    async def test_saves_and_retrieves_group_with_members(
        self,
        group_repository: GroupRepository,
        user_repository: UserRepository,
        async_session,
        clean_membership_data,
    ):
        """Should persist memberships and variables with the group."""
        user = await _save_user(user_repository, async_session)
        group = Group.create(name="Engineering", path="engineering")
        group.add_user(user.id, AccessLevel.OWNER)
        group.add_variable("DEPLOY_KEY", "secret", protected=True)

        async with async_session.begin():
            await group_repository.save(group)

        async with async_session.begin():
            retrieved = await group_repository.get_by_id(group.id)

        assert retrieved is not None
        assert retrieved.path == "engineering"
        assert retrieved.member_level(user.id) == AccessLevel.OWNER
        assert [v.key for v in retrieved.variables_for(protected_ref=True)] == [
            "DEPLOY_KEY"
        ]


class TestAncestors:
    """Tests for the recursive ancestor query."""

    @pytest.mark.asyncio
    async def test_returns_chain_nearest_first(
        self, group_repository: GroupRepository, async_session, clean_membership_data
    ):
        """Should return the group itself followed by each ancestor in order."""
        root = Group.create(name="Root", path="root")
        middle = Group.create(name="Middle", path="middle", parent_id=root.id)
        leaf = Group.create(name="Leaf", path="leaf", parent_id=middle.id)

        async with async_session.begin():
            for group in (root, middle, leaf):
                await group_repository.save(group)

        async with async_session.begin():
            chain = await group_repository.get_ancestors(leaf.id)

        assert [g.id for g in chain] == [leaf.id, middle.id, root.id]

    @pytest.mark.asyncio
    async def test_two_factor_groups_include_ancestors(
        self,
        group_repository: GroupRepository,
        user_repository: UserRepository,
        async_session,
        clean_membership_data,
    ):
        """A subgroup member is subject to the policy of the groups above."""
        user = await _save_user(user_repository, async_session)
        root = Group.create(
            name="Root",
            path="root",
            require_two_factor_authentication=True,
            two_factor_grace_period=12,
        )
        child = Group.create(name="Child", path="child", parent_id=root.id)
        child.add_user(user.id, AccessLevel.DEVELOPER)

        async with async_session.begin():
            await group_repository.save(root)
            await group_repository.save(child)

        async with async_session.begin():
            groups = await group_repository.list_two_factor_groups_for_user(user.id)

        assert [g.id for g in groups] == [root.id]


class TestUniqueness:
    """Tests for sibling uniqueness enforced by the database."""

    @pytest.mark.asyncio
    async def test_rejects_duplicate_top_level_path(
        self, group_repository: GroupRepository, async_session, clean_membership_data
    ):
        """Two top-level groups cannot share a path."""
        async with async_session.begin():
            await group_repository.save(Group.create(name="First", path="shared"))

        with pytest.raises(DuplicateGroupPathError):
            async with async_session.begin():
                await group_repository.save(
                    Group.create(name="Second", path="shared")
                )


class TestSearch:
    """Tests for case-insensitive search on name and path."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query",
        [
            "Platform Engineering",
            "form Eng",
            "plat-eng",
            "AT-EN",
        ],
        ids=["full-name", "partial-name", "full-path", "partial-path-mixed-case"],
    )
    async def test_matches_name_or_path_ignoring_case(
        self,
        group_repository: GroupRepository,
        async_session,
        clean_membership_data,
        query: str,
    ):
        """Should return the matching group and leave the other out."""
        matching = Group.create(name="Platform Engineering", path="plat-eng")
        other = Group.create(name="Sales", path="sales-team")

        async with async_session.begin():
            await group_repository.save(matching)
            await group_repository.save(other)

        async with async_session.begin():
            found = await group_repository.search(query)

        assert [g.id for g in found] == [matching.id]


class TestSubtreeMembers:
    """Tests for members of a group and its descendants."""

    @pytest.mark.asyncio
    async def test_includes_members_of_descendants_only(
        self,
        group_repository: GroupRepository,
        user_repository: UserRepository,
        async_session,
        clean_membership_data,
    ):
        """Members of subgroups are included; members of the parent are not."""
        parent_member = await _save_user(user_repository, async_session)
        child_member = await _save_user(user_repository, async_session)
        grandchild_member = await _save_user(user_repository, async_session)

        parent = Group.create(name="Parent", path="parent")
        parent.add_user(parent_member.id, AccessLevel.OWNER)
        child = Group.create(name="Child", path="child", parent_id=parent.id)
        child.add_user(child_member.id, AccessLevel.DEVELOPER)
        grandchild = Group.create(name="Grand", path="grand", parent_id=child.id)
        grandchild.add_user(grandchild_member.id, AccessLevel.GUEST)

        async with async_session.begin():
            for group in (parent, child, grandchild):
                await group_repository.save(group)

        async with async_session.begin():
            user_ids = await group_repository.list_member_ids_in_subtree(child.id)

        assert set(user_ids) == {child_member.id, grandchild_member.id}
