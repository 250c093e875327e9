"""Tests for logging setup."""

import json
import logging
import sys

from agentlens.config import Settings
from agentlens.log import JSONFormatter, configure_logging


def test_json_formatter_fields() -> None:
    """Test records render as one JSON object with the core fields."""
    record = logging.LogRecord("agentlens.engine.cache", logging.INFO, __file__, 1, "Cache %s", ("hit",), None)
    record.trace_id = "trace-abc"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "agentlens.engine.cache"
    assert entry["message"] == "Cache hit"
    assert entry["trace_id"] == "trace-abc"
    assert "timestamp" in entry


def test_json_formatter_includes_exception() -> None:
    """Test exception tracebacks are captured."""
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("agentlens", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    entry = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in entry["exception"]


def test_configure_logging_does_not_stack_handlers() -> None:
    """Test repeated configuration keeps a single handler."""
    configure_logging(Settings(log_level="debug", log_format="text"))
    logger = configure_logging(Settings(log_level="warning", log_format="json"))

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)
    assert logger.level == logging.WARNING
