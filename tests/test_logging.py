"""Tests for structured logging."""

from __future__ import annotations

import importlib
import json
from io import StringIO

import pytest
import structlog

from railreport.logging import configure_logging, get_logger, run_id_ctx


class TestLoggingConfig:
    """Test suite for logging configuration."""

    def test_logger_outputs_json_format(self):
        """JSON lines carry the event, level, logger name and timestamp."""
        # Given
        output = StringIO()
        configure_logging(log_level="INFO", json_format=True, stream=output)
        logger = get_logger("test")

        # When
        logger.info("test message", key="value")

        # Then
        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "test message"
        assert parsed["key"] == "value"
        assert parsed["level"] == "info"
        assert parsed["logger_name"] == "test"
        assert "timestamp" in parsed

    def test_level_filtering(self):
        """Debug events are dropped at INFO."""
        output = StringIO()
        configure_logging(log_level="INFO", json_format=True, stream=output)

        get_logger("test").debug("hidden")

        assert output.getvalue() == ""

    def test_module_logger_follows_reconfiguration(self):
        """Loggers created before configure_logging use the new settings."""
        logger = get_logger("early")
        output = StringIO()
        configure_logging(log_level="DEBUG", json_format=True, stream=output)

        logger.debug("now visible")

        assert json.loads(output.getvalue())["event"] == "now visible"

    def test_run_id_is_added_from_context(self):
        output = StringIO()
        configure_logging(log_level="INFO", json_format=True, stream=output)

        token = run_id_ctx.set("42")
        try:
            get_logger("test").info("uploading")
        finally:
            run_id_ctx.reset(token)

        assert json.loads(output.getvalue())["run_id"] == "42"

    def test_console_format(self):
        output = StringIO()
        configure_logging(log_level="INFO", json_format=False, stream=output)

        get_logger("test").info("readable", count=2)

        assert "readable" in output.getvalue()
        assert "count=2" in output.getvalue()


class TestModuleLoggers:
    """Module-level loggers are created at import and stay usable."""

    def test_config_imports(self):
        assert importlib.import_module("railreport.config").DEFAULT_CONFIG_FILE

    @pytest.mark.parametrize(
        "module",
        [
            "railreport.aggregation",
            "railreport.cli.app",
            "railreport.parsers.junit",
            "railreport.parsers.sources",
            "railreport.pipeline",
            "railreport.resolution.mapping",
            "railreport.resolution.coverage",
            "railreport.resolution.resolver",
            "railreport.retry",
            "railreport.testrail.client",
        ],
    )
    def test_module_logger_emits(self, module, log_stream):
        """Each module's logger, created at import, writes to the configured stream."""
        # Given
        logger = importlib.import_module(module).logger

        # When
        logger.info("module_check")

        # Then
        parsed = json.loads(log_stream.getvalue())
        assert parsed["event"] == "module_check"
        assert parsed["logger_name"] == module

    def test_logger_created_before_configuration_emits(self):
        """A logger from get_logger follows a later configure_logging call."""
        # Given
        structlog.reset_defaults()
        logger = get_logger("railreport.example")
        output = StringIO()

        # When
        configure_logging(log_level="INFO", json_format=True, stream=output)
        logger.info("configured_late", count=2)

        # Then
        parsed = json.loads(output.getvalue())
        assert parsed["event"] == "configured_late"
        assert parsed["logger_name"] == "railreport.example"
        assert parsed["count"] == 2
