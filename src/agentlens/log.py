"""Logging setup for AgentLens.

Design Philosophy:
- Standard library logging with one module logger per file
- JSON lines by default so request-boundary errors are machine readable
- Configured once at application start-up from Settings
"""

import json
import logging
import sys
from datetime import datetime, timezone

from agentlens.config import Settings


class JSONFormatter(logging.Formatter):
    """Render each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            log_entry["trace_id"] = trace_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """Install a single stream handler on the ``agentlens`` logger.

    Args:
        settings: Application settings (log_level, log_format)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("agentlens")
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    # Replace rather than stack handlers when called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    return logger
