"""Structured JSON logging for patchpilot."""

import json
import logging
import os
import traceback
from datetime import UTC, datetime
from typing import Any

ROOT_LOGGER = "patchpilot"

# Attributes every LogRecord carries; anything else came in through `extra=`
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _jsonable(value: Any) -> Any:
    """Return the value if it serializes to JSON, otherwise its string form."""
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string.
        """
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = _jsonable(value)

        return json.dumps(entry, default=str)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Install the JSON formatter on the ``patchpilot`` logger.

    Args:
        level: Log level name. Defaults to ``LOG_LEVEL`` or INFO.

    Returns:
        The configured root logger of the application.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    # Re-configuring must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        module_name: Dotted module name below ``patchpilot``.

    Returns:
        Child logger instance.
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")
