"""Unit tests for Group domain probe."""

from unittest.mock import MagicMock

import structlog

from membership.domain.aggregates import Group
from membership.domain.observability.group_probe import DefaultGroupProbe, GroupProbe
from membership.domain.value_objects import GroupId, UserId


class TestDefaultGroupProbeInit:
    """Tests for DefaultGroupProbe initialization."""

    def test_creates_with_default_logger(self):
        probe = DefaultGroupProbe()

        assert probe._logger is not None

    def test_creates_with_custom_logger(self):
        custom_logger = structlog.get_logger()
        probe = DefaultGroupProbe(logger=custom_logger)

        assert probe._logger is custom_logger

    def test_is_usable_as_protocol(self):
        probe: GroupProbe = DefaultGroupProbe()

        probe.access_requested(group_id="g-1", user_id="u-1")


class TestProbeLogging:
    """Tests for the structured log lines emitted by DefaultGroupProbe."""

    def test_member_added(self):
        mock_logger = MagicMock()
        probe = DefaultGroupProbe(logger=mock_logger)

        probe.member_added(group_id="g-1", user_id="u-1", access_level=30)

        mock_logger.info.assert_called_once_with(
            "group_member_added", group_id="g-1", user_id="u-1", access_level=30
        )

    def test_member_access_level_changed(self):
        mock_logger = MagicMock()
        probe = DefaultGroupProbe(logger=mock_logger)

        probe.member_access_level_changed(
            group_id="g-1", user_id="u-1", old_access_level=30, new_access_level=50
        )

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "group_member_access_level_changed"
        assert call_args[1]["old_access_level"] == 30
        assert call_args[1]["new_access_level"] == 50

    def test_member_removed(self):
        mock_logger = MagicMock()
        probe = DefaultGroupProbe(logger=mock_logger)

        probe.member_removed(group_id="g-1", user_id="u-1", access_level=10)

        assert mock_logger.info.call_args[0][0] == "group_member_removed"

    def test_two_factor_policy_changed(self):
        mock_logger = MagicMock()
        probe = DefaultGroupProbe(logger=mock_logger)

        probe.two_factor_policy_changed(
            group_id="g-1",
            changed_fields=["require_two_factor_authentication"],
            affected_user_count=3,
        )

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "group_two_factor_policy_changed"
        assert call_args[1]["changed_fields"] == ["require_two_factor_authentication"]
        assert call_args[1]["affected_user_count"] == 3


class TestAggregateUsesProbe:
    """The aggregate reports its changes through the injected probe."""

    def test_add_user_calls_probe(self):
        probe = MagicMock(spec=GroupProbe)
        group = Group(id=GroupId.generate(), name="Team", path="team", _probe=probe)
        user_id = UserId.generate()

        group.add_developer(user_id)

        probe.member_added.assert_called_once_with(
            group_id=group.id.value, user_id=user_id.value, access_level=30
        )

    def test_relevel_calls_access_level_changed(self):
        probe = MagicMock(spec=GroupProbe)
        group = Group(id=GroupId.generate(), name="Team", path="team", _probe=probe)
        user_id = UserId.generate()
        group.add_developer(user_id)

        group.add_master(user_id)

        probe.member_access_level_changed.assert_called_once()

    def test_update_reports_two_factor_change(self):
        probe = MagicMock(spec=GroupProbe)
        group = Group(id=GroupId.generate(), name="Team", path="team", _probe=probe)
        group.add_owner(UserId.generate())

        group.update(require_two_factor_authentication=True)

        probe.two_factor_policy_changed.assert_called_once_with(
            group_id=group.id.value,
            changed_fields=["require_two_factor_authentication"],
            affected_user_count=1,
        )
