"""Tests for structlog configuration."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from ravenmd.config.logging import PACKAGE_LOGGER, QUIET_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    raven = logging.getLogger(PACKAGE_LOGGER)
    raven_level = raven.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    raven.setLevel(raven_level)


def _json_lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestLevels:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, stream=io.StringIO())
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default_is_warning(self) -> None:
        configure_logging(stream=io.StringIO())
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    def test_quiet_libraries(self) -> None:
        configure_logging(verbose=True, stream=io.StringIO())
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestJsonOutput:
    def test_structlog_event(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)
        structlog.get_logger("ravenmd.test").warning("json test", answer=42)
        (parsed,) = _json_lines(stream)
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "ravenmd.test"
        assert "timestamp" in parsed

    def test_module_logger_is_structured(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)
        logging.getLogger("ravenmd.services.parse").debug("Parsed %d documents", 3)
        (parsed,) = _json_lines(stream)
        assert parsed["event"] == "Parsed 3 documents"
        assert parsed["logger"] == "ravenmd.services.parse"

    def test_debug_hidden_without_verbose(self) -> None:
        stream = io.StringIO()
        configure_logging(log_json=True, stream=stream)
        logging.getLogger("ravenmd.services.parse").debug("Parsed %d documents", 3)
        assert stream.getvalue() == ""

    def test_library_debug_suppressed(self) -> None:
        stream = io.StringIO()
        configure_logging(verbose=True, log_json=True, stream=stream)
        logging.getLogger("markdown_it").debug("token noise")
        assert stream.getvalue() == ""


class TestHandlers:
    def test_reconfigure_replaces_own_handler(self) -> None:
        first, second = io.StringIO(), io.StringIO()
        configure_logging(stream=first)
        configure_logging(log_json=True, stream=second)
        logging.getLogger("ravenmd.x").warning("once")
        assert first.getvalue() == ""
        assert len(_json_lines(second)) == 1

    def test_foreign_handlers_kept(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)
        configure_logging(stream=io.StringIO())
        assert foreign in logging.getLogger().handlers

    def test_console_mode_is_plain_text(self) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream)
        logging.getLogger("ravenmd.x").warning("plain %s", "line")
        assert "plain line" in stream.getvalue()
