"""Tests for logging setup."""

import json

import pytest
import structlog

from tenantdb.core.logging import get_logger, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    def test_setup_without_errors(self):
        setup_logging()

    def test_setup_verbose(self):
        setup_logging(verbose=True)

    def test_setup_json(self):
        setup_logging(json_output=True)


@pytest.mark.unit
class TestGetLogger:
    def test_get_logger_without_name(self):
        setup_logging()
        assert get_logger() is not None

    def test_get_logger_with_name(self):
        setup_logging()
        assert get_logger("test_module") is not None


@pytest.mark.unit
class TestLogOutput:
    def test_log_to_stderr(self, capsys):
        """Log output goes to stderr, not stdout."""
        setup_logging(verbose=True)
        get_logger().info("test message")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "test message" in captured.err

    def test_debug_hidden_unless_verbose(self, capsys):
        setup_logging(verbose=False)
        get_logger().debug("executing query")

        assert "executing query" not in capsys.readouterr().err

    def test_debug_shown_when_verbose(self, capsys):
        setup_logging(verbose=True)
        get_logger().debug("executing query")

        assert "executing query" in capsys.readouterr().err

    def test_json_lines_carry_bound_context(self, capsys):
        setup_logging(json_output=True)
        with structlog.contextvars.bound_contextvars(tenant="acme", table="orders"):
            get_logger("ddl").info("column added", column="note")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["event"] == "column added"
        assert event["tenant"] == "acme"
        assert event["table"] == "orders"
        assert event["logger"] == "ddl"
        assert event["level"] == "info"
        assert "timestamp" in event
