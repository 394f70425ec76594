"""Tests for checkmate structured logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from checkmate.logging import (
    HumanFormatter,
    JSONFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
    log_async_function,
    log_function,
)


def _record(level: int = logging.INFO, msg: str = "template_loaded", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="checkmate.template.loader",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
        func="load",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# =============================================================================
# Formatter Tests
# =============================================================================


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self) -> None:
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "checkmate.template.loader"
        assert data["message"] == "template_loaded"
        assert "timestamp" in data
        assert "location" not in data

    def test_extra_fields_top_level(self) -> None:
        data = json.loads(JSONFormatter().format(_record(url="https://x/t.yaml", sections=3)))

        assert data["url"] == "https://x/t.yaml"
        assert data["sections"] == 3

    def test_error_includes_location(self) -> None:
        data = json.loads(JSONFormatter().format(_record(level=logging.ERROR)))

        assert data["location"]["function"] == "load"
        assert data["location"]["line"] == 10

    def test_exception_included(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad value" in data["exception"]

    def test_non_serializable_extra(self) -> None:
        data = json.loads(JSONFormatter().format(_record(path=object())))
        assert "object" in data["path"]


class TestHumanFormatter:
    def test_line_shape(self) -> None:
        line = HumanFormatter().format(_record(url="https://x/t.yaml"))

        assert "INFO" in line
        assert "checkmate.template.loader: template_loaded" in line
        assert line.endswith("url=https://x/t.yaml")


# =============================================================================
# StructuredLogger Tests
# =============================================================================


class TestStructuredLogger:
    """Tests for StructuredLogger and get_logger."""

    def test_namespaced(self) -> None:
        assert get_logger("engine").name == "checkmate.engine"
        assert get_logger("checkmate.engine").name == "checkmate.engine"
        assert get_logger("checkmate").name == "checkmate"

    def test_child(self) -> None:
        assert get_logger("state").child("reconciler").name == "checkmate.state.reconciler"

    def test_underlying_logger(self) -> None:
        logger = get_logger("engine")
        assert isinstance(logger.logger, logging.Logger)
        assert logger.logger is logging.getLogger("checkmate.engine")

    def test_kwargs_become_extras(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = StructuredLogger("tests")

        with caplog.at_level(logging.INFO, logger="checkmate"):
            logger.info("state_saved", state_key="octo/repo#1", items=4)

        record = caplog.records[-1]
        assert record.getMessage() == "state_saved"
        assert record.state_key == "octo/repo#1"
        assert record.items == 4

    def test_reserved_names_renamed(self, caplog: pytest.LogCaptureFixture) -> None:
        """Extras that collide with LogRecord attributes get a trailing underscore."""
        logger = StructuredLogger("tests")

        with caplog.at_level(logging.INFO, logger="checkmate"):
            logger.info("renamed", name="x", module="y")

        record = caplog.records[-1]
        assert record.name == "checkmate.tests"
        assert record.name_ == "x"
        assert record.module_ == "y"

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = StructuredLogger("tests")

        with caplog.at_level(logging.WARNING, logger="checkmate"):
            logger.debug("hidden")
            logger.info("hidden")

        assert caplog.records == []

    def test_exception_captures_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = StructuredLogger("tests")

        with caplog.at_level(logging.ERROR, logger="checkmate"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("operation_failed")

        assert caplog.records[-1].exc_info is not None


# =============================================================================
# configure_logging Tests
# =============================================================================


class TestConfigureLogging:
    def test_json_format(self) -> None:
        configure_logging(level="DEBUG", format="json")

        root = logging.getLogger("checkmate")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.propagate is False

    def test_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHECKMATE_LOG_LEVEL", "warning")
        monkeypatch.setenv("CHECKMATE_LOG_FORMAT", "human")
        configure_logging()

        root = logging.getLogger("checkmate")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, HumanFormatter)

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging(level="chatty")
        assert logging.getLogger("checkmate").level == logging.INFO

    def test_idempotent(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger("checkmate").handlers) == 1


# =============================================================================
# Decorator Tests
# =============================================================================


class TestLogDecorators:
    def test_log_function(self, caplog: pytest.LogCaptureFixture) -> None:
        @log_function(get_logger("tests"))
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG, logger="checkmate"):
            assert add(1, 2) == 3

        messages = [r.getMessage() for r in caplog.records]
        assert messages == ["call_started", "call_completed"]
        assert caplog.records[-1].duration_ms >= 0

    def test_log_function_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        @log_function(get_logger("tests"))
        def fail():
            raise ValueError("nope")

        with caplog.at_level(logging.DEBUG, logger="checkmate"):
            with pytest.raises(ValueError):
                fail()

        assert caplog.records[-1].getMessage() == "call_failed"
        assert caplog.records[-1].error_type == "ValueError"

    @pytest.mark.asyncio
    async def test_log_async_function(self, caplog: pytest.LogCaptureFixture) -> None:
        @log_async_function(get_logger("tests"))
        async def double(x):
            return x * 2

        with caplog.at_level(logging.DEBUG, logger="checkmate"):
            assert await double(4) == 8

        assert caplog.records[-1].getMessage() == "call_completed"
        assert caplog.records[-1].function.endswith("double")
