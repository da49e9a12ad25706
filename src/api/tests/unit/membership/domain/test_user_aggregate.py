"""Unit tests for User aggregate."""

from membership.domain.aggregates import Group, User
from membership.domain.value_objects import GroupId, UserId


def _group(require: bool, grace_period: int | None = 48) -> Group:
    return Group(
        id=GroupId.generate(),
        name="Team",
        path="team",
        require_two_factor_authentication=require,
        two_factor_grace_period=grace_period,
    )


class TestUserIdentity:
    """Tests for identity-based equality."""

    def test_users_with_same_id_are_equal(self):
        user_id = UserId.generate()

        assert User(id=user_id, username="alice") == User(id=user_id, username="bob")

    def test_users_with_different_ids_are_not_equal(self):
        assert User(id=UserId.generate(), username="alice") != User(
            id=UserId.generate(), username="alice"
        )

    def test_user_is_hashable(self):
        user = User(id=UserId.generate(), username="alice")

        assert {user, user} == {user}

    def test_str(self):
        assert str(User(id=UserId.generate(), username="alice")) == "User(alice)"


class TestUpdateTwoFactorRequirement:
    """Tests for deriving the two-factor requirement from groups."""

    def test_requires_when_any_group_requires(self):
        user = User(id=UserId.generate(), username="alice")

        changed = user.update_two_factor_requirement(
            [_group(False), _group(True, grace_period=24)]
        )

        assert changed is True
        assert user.require_two_factor_authentication_from_group is True
        assert user.two_factor_grace_period == 24

    def test_uses_shortest_grace_period(self):
        user = User(id=UserId.generate(), username="alice")

        user.update_two_factor_requirement(
            [_group(True, grace_period=72), _group(True, grace_period=6)]
        )

        assert user.two_factor_grace_period == 6

    def test_ignores_grace_period_of_groups_not_requiring(self):
        user = User(id=UserId.generate(), username="alice")

        user.update_two_factor_requirement(
            [_group(False, grace_period=1), _group(True, grace_period=12)]
        )

        assert user.two_factor_grace_period == 12

    def test_clears_requirement_when_no_group_requires(self):
        user = User(
            id=UserId.generate(),
            username="alice",
            require_two_factor_authentication_from_group=True,
            two_factor_grace_period=6,
        )

        changed = user.update_two_factor_requirement([_group(False)])

        assert changed is True
        assert user.require_two_factor_authentication_from_group is False
        assert user.two_factor_grace_period == 48

    def test_uses_given_default_grace_period(self):
        user = User(id=UserId.generate(), username="alice")

        user.update_two_factor_requirement([], default_grace_period=10)

        assert user.two_factor_grace_period == 10

    def test_recomputing_twice_changes_nothing(self):
        user = User(id=UserId.generate(), username="alice")
        groups = [_group(True, grace_period=24)]

        assert user.update_two_factor_requirement(groups) is True
        assert user.update_two_factor_requirement(groups) is False
