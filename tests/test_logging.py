"""
Tests for the logging module.

Tests verify:
- JSON output carries ECS-style field names and service metadata
- DEBUG logs are suppressed at INFO level
- log_step emits duration and re-raises errors
"""

import json

import pytest

from fallible.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    log_step,
    timed_block,
)

pytestmark = pytest.mark.usefixtures("reset_logging")


def _lines(captured: str) -> list[dict]:
    return [json.loads(line) for line in captured.splitlines() if line.strip()]


class TestConfigureLogging:
    def test_json_output_fields(self, capsys):
        configure_logging(level="INFO", json_format=True, service="fallible-test")
        get_logger("tests.logging").info("event_happened", count=42)

        (record,) = _lines(capsys.readouterr().err)
        assert record["event"] == "event_happened"
        assert record["count"] == 42
        assert record["log.level"] == "info"
        assert record["service.name"] == "fallible-test"
        assert record["logger_name"] == "tests.logging"
        assert "@timestamp" in record

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)
        log = get_logger("tests.logging")
        log.debug("hidden")
        log.info("shown")

        events = [r["event"] for r in _lines(capsys.readouterr().err)]
        assert events == ["shown"]

    def test_module_logger_created_before_configure(self, capsys):
        early = get_logger("tests.early")
        configure_logging(level="INFO", json_format=True)
        early.info("late_config")

        (record,) = _lines(capsys.readouterr().err)
        assert record["event"] == "late_config"
        assert record["logger_name"] == "tests.early"

    def test_modules_with_module_level_loggers_import(self):
        import importlib

        for module in ("fallible.strategies", "fallible.bench", "fallible.cli.app"):
            assert importlib.import_module(module).__name__ == module

    def test_console_renderer(self, capsys):
        configure_logging(level="INFO", json_format=False)
        get_logger().info("console_event")
        assert "console_event" in capsys.readouterr().err


class TestContext:
    def test_bound_context_is_merged(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(run="r1")
        get_logger().info("with_context")
        clear_context()
        get_logger().info("without_context")

        first, second = _lines(capsys.readouterr().err)
        assert first["run"] == "r1"
        assert "run" not in second

    def test_log_context_scope(self, capsys):
        configure_logging(level="INFO", json_format=True)
        with LogContext(strategy="loop"):
            get_logger().info("inside")
        get_logger().info("outside")

        inside, outside = _lines(capsys.readouterr().err)
        assert inside["strategy"] == "loop"
        assert "strategy" not in outside


class TestTiming:
    def test_timed_block_measures(self):
        with timed_block("work") as timer:
            sum(range(1000))
        assert timer.ended_at is not None
        assert timer.duration_ms >= 0

    def test_log_step_logs_start_and_end(self, capsys):
        configure_logging(level="DEBUG", json_format=True)
        with log_step("bench.loop", size=10) as timer:
            timer.add_metric("status", "ok")

        start, end = _lines(capsys.readouterr().err)
        assert start["event"] == "bench.loop.start"
        assert end["event"] == "bench.loop.end"
        assert end["status"] == "ok"
        assert end["size"] == 10
        assert "duration_ms" in end

    def test_log_step_error_is_logged_and_reraised(self, capsys):
        configure_logging(level="INFO", json_format=True)
        with pytest.raises(RuntimeError):
            with log_step("bench.fail"):
                raise RuntimeError("boom")

        (record,) = _lines(capsys.readouterr().err)
        assert record["event"] == "bench.fail.error"
        assert record["error_type"] == "RuntimeError"
        assert record["status"] == "error"
