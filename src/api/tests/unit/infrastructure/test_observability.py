"""Unit tests for the observation context and database probe."""

from unittest.mock import MagicMock

from infrastructure.observability import DefaultDatabaseProbe, ObservationContext


class TestObservationContext:
    def test_empty_context_logs_nothing(self):
        assert ObservationContext().as_dict() == {}

    def test_includes_set_values(self):
        context = ObservationContext(request_id="req-1", actor_id="u-1")

        assert context.as_dict() == {"request_id": "req-1", "actor_id": "u-1"}

    def test_group_scope_uses_its_own_key(self):
        context = ObservationContext(request_id="req-1").with_group("g-1")

        assert context.as_dict() == {"request_id": "req-1", "scope_group_id": "g-1"}

    def test_with_extra_merges(self):
        context = ObservationContext(extra={"a": 1}).with_extra(b=2)

        assert context.as_dict() == {"a": 1, "b": 2}

    def test_is_immutable(self):
        context = ObservationContext(request_id="req-1")

        scoped = context.with_group("g-1")

        assert context.group_id is None
        assert scoped is not context


class TestDefaultDatabaseProbe:
    def test_engine_created(self):
        mock_logger = MagicMock()
        probe = DefaultDatabaseProbe(logger=mock_logger)

        probe.engine_created("read", "db.internal", "membership")

        mock_logger.info.assert_called_once_with(
            "database_engine_created",
            role="read",
            host="db.internal",
            database="membership",
        )

    def test_session_rolled_back_includes_error_type(self):
        mock_logger = MagicMock()
        probe = DefaultDatabaseProbe(logger=mock_logger)

        probe.session_rolled_back("write", ValueError("bad"))

        call_kwargs = mock_logger.warning.call_args[1]
        assert call_kwargs["error"] == "bad"
        assert call_kwargs["error_type"] == "ValueError"

    def test_with_context(self):
        mock_logger = MagicMock()
        probe = DefaultDatabaseProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-9")
        )

        probe.pool_closed("write")

        assert mock_logger.info.call_args[1]["request_id"] == "req-9"
