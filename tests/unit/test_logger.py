"""Tests for structured logging helpers."""

import structlog

from trade_compass.observability.logger import (
    _add_run_id,
    bind_context,
    clear_context,
    new_run_id,
)


class TestRunId:
    def test_new_run_id_changes(self):
        first = new_run_id()
        second = new_run_id()
        assert first != second
        assert len(second) == 12

    def test_processor_stamps_current_run(self):
        rid = new_run_id()
        event = _add_run_id(None, "info", {"event": "x"})
        assert event["run_id"] == rid

    def test_processor_reuses_run_id_across_entries(self):
        new_run_id()
        first = _add_run_id(None, "info", {"event": "a"})
        second = _add_run_id(None, "info", {"event": "b"})
        assert first["run_id"] == second["run_id"]


class TestContext:
    def test_bind_and_clear(self):
        clear_context()
        bind_context(command="kpis")
        assert structlog.contextvars.get_contextvars() == {"command": "kpis"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
