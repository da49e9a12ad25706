"""Unit tests for MembershipResolver."""

from unittest.mock import create_autospec

import pytest

from membership.application.observability import MembershipResolverProbe
from membership.application.services import MembershipResolver
from membership.domain.aggregates import Project
from membership.domain.value_objects import AccessLevel, GroupId, UserId
from membership.ports.exceptions import GroupNotFoundError, UnauthorizedError
from membership.ports.repositories import IGroupRepository


@pytest.fixture
def mock_group_repository():
    return create_autospec(IGroupRepository, instance=True)


@pytest.fixture
def mock_probe():
    return create_autospec(MembershipResolverProbe, instance=True)


@pytest.fixture
def resolver(mock_group_repository, membership_settings, mock_probe):
    return MembershipResolver(
        group_repository=mock_group_repository,
        settings=membership_settings,
        probe=mock_probe,
    )


@pytest.fixture
def chain_of_subgroup(mock_group_repository, root_group, subgroup):
    """Make the repository return subgroup's ancestor chain."""
    mock_group_repository.get_ancestors.return_value = [subgroup, root_group]
    return [subgroup, root_group]


class TestAncestorChain:
    """Tests for loading chains through the repository."""

    @pytest.mark.asyncio
    async def test_builds_chain(
        self, resolver, chain_of_subgroup, subgroup, mock_probe
    ):
        chain = await resolver.ancestor_chain(subgroup.id)

        assert chain.full_path == "root/sub"
        mock_probe.chain_loaded.assert_called_once_with(subgroup.id.value, depth=2)

    @pytest.mark.asyncio
    async def test_missing_group(self, resolver, mock_group_repository, mock_probe):
        mock_group_repository.get_ancestors.return_value = []
        group_id = GroupId.generate()

        assert await resolver.ancestor_chain(group_id) is None
        mock_probe.group_not_found.assert_called_once_with(group_id.value)


class TestEffectiveAccess:
    """Tests for inherited access decisions."""

    @pytest.mark.asyncio
    async def test_inherits_owner_from_parent(
        self, resolver, chain_of_subgroup, root_group, subgroup
    ):
        user_id = UserId.generate()
        root_group.add_owner(user_id)

        assert (
            await resolver.effective_access_level(subgroup.id, user_id)
            == AccessLevel.OWNER
        )
        assert await resolver.has_owner(subgroup.id, user_id)
        assert await resolver.has_access_at_least(
            subgroup.id, user_id, AccessLevel.MASTER
        )

    @pytest.mark.asyncio
    async def test_non_member_has_no_level(self, resolver, chain_of_subgroup, subgroup):
        user_id = UserId.generate()

        assert await resolver.effective_access_level(subgroup.id, user_id) is None
        assert not await resolver.has_access_at_least(
            subgroup.id, user_id, AccessLevel.GUEST
        )

    @pytest.mark.asyncio
    async def test_missing_group_grants_nothing(self, resolver, mock_group_repository):
        mock_group_repository.get_ancestors.return_value = []

        assert (
            await resolver.effective_access_level(GroupId.generate(), UserId.generate())
            is None
        )

    @pytest.mark.asyncio
    async def test_has_master_is_exact(
        self, resolver, chain_of_subgroup, root_group, subgroup
    ):
        master = UserId.generate()
        owner = UserId.generate()
        subgroup.add_master(master)
        root_group.add_owner(owner)

        assert await resolver.has_master(subgroup.id, master)
        assert not await resolver.has_master(subgroup.id, owner)
        assert not await resolver.has_owner(subgroup.id, master)


class TestRequireAccess:
    @pytest.mark.asyncio
    async def test_returns_chain_when_allowed(
        self, resolver, chain_of_subgroup, subgroup
    ):
        user_id = UserId.generate()
        subgroup.add_owner(user_id)

        chain = await resolver.require_access(subgroup.id, user_id, AccessLevel.OWNER)

        assert chain.group is subgroup

    @pytest.mark.asyncio
    async def test_denies_insufficient_level(
        self, resolver, chain_of_subgroup, subgroup, mock_probe
    ):
        user_id = UserId.generate()
        subgroup.add_developer(user_id)

        with pytest.raises(UnauthorizedError, match="needs Owner access"):
            await resolver.require_access(subgroup.id, user_id, AccessLevel.OWNER)

        mock_probe.access_denied.assert_called_once_with(
            group_id=subgroup.id.value,
            user_id=user_id.value,
            required_level=50,
            effective_level=30,
        )

    @pytest.mark.asyncio
    async def test_missing_group(self, resolver, mock_group_repository):
        mock_group_repository.get_ancestors.return_value = []

        with pytest.raises(GroupNotFoundError):
            await resolver.require_access(
                GroupId.generate(), UserId.generate(), AccessLevel.GUEST
            )


class TestListings:
    """Tests for direct member listings."""

    @pytest.mark.asyncio
    async def test_members_and_requesters(
        self, resolver, mock_group_repository, root_group
    ):
        root_group.request_access_enabled = True
        member = UserId.generate()
        requester = UserId.generate()
        root_group.add_developer(member)
        root_group.request_access(requester)
        mock_group_repository.get_by_id.return_value = root_group

        members = await resolver.members(root_group.id)
        requesters = await resolver.requesters(root_group.id)

        assert [m.user_id for m in members] == [member]
        assert [m.user_id for m in requesters] == [requester]

    @pytest.mark.asyncio
    async def test_users_are_owners(self, resolver, mock_group_repository, root_group):
        owner = UserId.generate()
        root_group.add_owner(owner)
        root_group.add_master(UserId.generate())
        mock_group_repository.get_by_id.return_value = root_group

        assert await resolver.owners(root_group.id) == [owner]
        assert await resolver.users(root_group.id) == [owner]

    @pytest.mark.asyncio
    async def test_missing_group_lists_nothing(
        self, resolver, mock_group_repository, mock_probe
    ):
        mock_group_repository.get_by_id.return_value = None
        group_id = GroupId.generate()

        assert await resolver.members(group_id) == []
        assert await resolver.owners(group_id) == []
        mock_probe.group_not_found.assert_called_with(group_id.value)

    @pytest.mark.asyncio
    async def test_members_with_parents(
        self, resolver, chain_of_subgroup, root_group, subgroup
    ):
        near = UserId.generate()
        far = UserId.generate()
        subgroup.add_guest(near)
        root_group.add_owner(far)

        memberships = await resolver.members_with_parents(subgroup.id)
        user_ids = await resolver.user_ids_for_project_authorizations(subgroup.id)

        assert [m.user_id for m in memberships] == [near, far]
        assert user_ids == [near, far]


class TestSecretVariablesFor:
    @pytest.mark.asyncio
    async def test_unprotected_ref_hides_protected_variables(
        self, resolver, chain_of_subgroup, root_group, subgroup, project, mock_probe
    ):
        root_group.add_variable("ROOT_SECRET", "r", protected=True)
        subgroup.add_variable("SUB_VAR", "s")

        variables = await resolver.secret_variables_for(subgroup.id, "feature", project)

        assert [v.key for v in variables] == ["SUB_VAR"]
        mock_probe.secret_variables_resolved.assert_called_once_with(
            group_id=subgroup.id.value,
            project_id=project.id.value,
            protected_ref=False,
            count=1,
        )

    @pytest.mark.asyncio
    async def test_protected_ref_sees_all_nearest_first(
        self, resolver, chain_of_subgroup, root_group, subgroup, project
    ):
        project.protect_branch("master")
        root_group.add_variable("ROOT_SECRET", "r", protected=True)
        subgroup.add_variable("SUB_VAR", "s")

        variables = await resolver.secret_variables_for(subgroup.id, "master", project)

        assert [v.key for v in variables] == ["SUB_VAR", "ROOT_SECRET"]

    @pytest.mark.asyncio
    async def test_empty_repository_uses_default_protection(
        self, resolver, chain_of_subgroup, root_group, subgroup
    ):
        root_group.add_variable("ROOT_SECRET", "r", protected=True)
        empty = Project.create(name="empty", group_id=subgroup.id)

        variables = await resolver.secret_variables_for(subgroup.id, "any", empty)

        assert [v.key for v in variables] == ["ROOT_SECRET"]

    @pytest.mark.asyncio
    async def test_missing_group(self, resolver, mock_group_repository, project):
        mock_group_repository.get_ancestors.return_value = []

        assert await resolver.secret_variables_for(
            GroupId.generate(), "master", project
        ) == []


class TestLfsEnabled:
    @pytest.mark.asyncio
    async def test_group_override(self, resolver, mock_group_repository, root_group):
        root_group.lfs_enabled = False
        mock_group_repository.get_by_id.return_value = root_group

        assert await resolver.lfs_enabled(root_group.id) is False

    @pytest.mark.asyncio
    async def test_inherits_global_switch(
        self, mock_group_repository, membership_settings, root_group
    ):
        settings = membership_settings.model_copy(update={"lfs_enabled": False})
        resolver = MembershipResolver(
            group_repository=mock_group_repository, settings=settings
        )
        root_group.lfs_enabled = True
        mock_group_repository.get_by_id.return_value = root_group

        assert await resolver.lfs_enabled(root_group.id) is False
