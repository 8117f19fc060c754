import structlog

from pharmacy.utils.logging import get_log_level, order_context


class TestOrderContext:
    def test_binds_session_id_inside_block_only(self):
        with order_context("sess-42", channel="web"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["session_id"] == "sess-42"
            assert bound["channel"] == "web"

        assert "session_id" not in structlog.contextvars.get_contextvars()

    def test_none_values_are_not_bound(self):
        with order_context(None):
            assert "session_id" not in structlog.contextvars.get_contextvars()

    def test_nested_blocks_restore_outer_session(self):
        with order_context("outer"):
            with order_context("inner"):
                assert structlog.contextvars.get_contextvars()["session_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["session_id"] == "outer"


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_log_level() == "WARNING"
