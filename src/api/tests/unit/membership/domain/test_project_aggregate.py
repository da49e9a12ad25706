"""Unit tests for Project aggregate and ref protection."""

import pytest

from membership.domain.aggregates import Project
from membership.domain.value_objects import BranchProtection, GroupId


class TestProjectFactory:
    def test_create_starts_empty(self):
        group_id = GroupId.generate()

        project = Project.create(name="app", group_id=group_id)

        assert project.group_id == group_id
        assert project.empty_repo is True
        assert project.default_branch == "master"
        assert project.protected_branches == []

    @pytest.mark.parametrize("name", ["", "x" * 256])
    def test_create_rejects_invalid_name(self, name):
        with pytest.raises(ValueError, match="between 1 and 255"):
            Project.create(name=name, group_id=GroupId.generate())


class TestProtectionRules:
    """Tests for adding protected branch and tag rules."""

    def test_protect_branch(self, project):
        project.protect_branch("master")

        assert project.protected_branches == ["master"]

    def test_rejects_blank_rule(self, project):
        with pytest.raises(ValueError, match="cannot be empty"):
            project.protect_branch("  ")

    def test_rejects_duplicate_tag_rule(self, project):
        project.protect_tag("v*")

        with pytest.raises(ValueError, match="already exists"):
            project.protect_tag("v*")


class TestIsProtectedRef:
    """Tests for ref protection decisions."""

    def test_exact_branch_rule(self, project):
        project.protect_branch("master")

        assert project.is_protected_ref("master", BranchProtection.FULL)
        assert not project.is_protected_ref("feature", BranchProtection.FULL)

    def test_wildcard_branch_rule(self, project):
        project.protect_branch("release/*")

        assert project.is_protected_ref("release/1.0", BranchProtection.NONE)
        assert not project.is_protected_ref("releases", BranchProtection.NONE)

    def test_wildcard_does_not_treat_dots_as_regex(self, project):
        project.protect_branch("v1.*")

        assert project.is_protected_ref("v1.2", BranchProtection.NONE)
        assert not project.is_protected_ref("v1x2", BranchProtection.NONE)

    def test_tag_rule(self, project):
        project.protect_tag("v*")

        assert project.is_protected_tag("v2.0")
        assert project.is_protected_ref("v2.0", BranchProtection.NONE)

    @pytest.mark.parametrize(
        "policy", [BranchProtection.FULL, BranchProtection.DEV_CAN_MERGE]
    )
    def test_empty_repository_is_fully_protected(self, subgroup, policy):
        empty = Project.create(name="empty", group_id=subgroup.id)

        assert empty.is_protected_ref("anything", policy)

    @pytest.mark.parametrize(
        "policy", [BranchProtection.NONE, BranchProtection.DEV_CAN_PUSH]
    )
    def test_empty_repository_without_blanket_policy(self, subgroup, policy):
        empty = Project.create(name="empty", group_id=subgroup.id)

        assert not empty.is_protected_ref("anything", policy)

    def test_blanket_policy_ignored_once_repository_has_commits(self, project):
        assert not project.is_protected_ref("anything", BranchProtection.FULL)
