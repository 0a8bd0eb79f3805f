"""Centralized logging configuration for flowtalk.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed by the application (or the CLI) through :func:`configure_logging`.

Usage:
    from flowtalk.core.logging_config import configure_logging, get_logger

    # Configure once at application startup
    configure_logging(level="DEBUG", format="json")

    # Get loggers in modules
    logger = get_logger(__name__)

Environment Variables:
    FLOWTALK_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    FLOWTALK_LOG_FORMAT: Output format ("text" or "json")
    FLOWTALK_LOG_FILE: Optional log file path
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Literal

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_FORMAT_WITH_MS = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)

_configured = False


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Outputs one object per record:
    {
        "timestamp": "2026-10-19T14:30:00.123000",
        "level": "DEBUG",
        "logger": "flowtalk.core.conversation.conversation",
        "message": "conversation_continue: step=next",
        "extra": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


def configure_logging(
    level: str | None = None,
    format: Literal["text", "json"] | None = None,
    file_path: str | None = None,
    include_ms: bool = True,
    force: bool = False,
) -> None:
    """Configure root logging for the application.

    Subsequent calls are ignored unless ``force=True``. Arguments take
    priority over the ``FLOWTALK_LOG_*`` environment variables.

    Args:
        level: Log level. Defaults to FLOWTALK_LOG_LEVEL or "INFO".
        format: Output format. Defaults to FLOWTALK_LOG_FORMAT or "text".
        file_path: Optional log file. Defaults to FLOWTALK_LOG_FILE.
        include_ms: Include milliseconds in text timestamps.
        force: Reconfigure even if already configured.

    Raises:
        ValueError: If the level or format is not recognised.
    """
    global _configured
    if _configured and not force:
        return

    level = level or os.environ.get("FLOWTALK_LOG_LEVEL", "INFO")
    format = format or os.environ.get("FLOWTALK_LOG_FORMAT", "text")  # type: ignore[assignment]
    file_path = file_path or os.environ.get("FLOWTALK_LOG_FILE")

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    if format not in ("text", "json"):
        raise ValueError(f"Unknown log format: {format}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if format == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        fmt = TEXT_FORMAT_WITH_MS if include_ms else TEXT_FORMAT
        formatter = logging.Formatter(fmt, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically ``__name__``)."""
    return logging.getLogger(name)


def set_level(level: str, logger_name: str | None = None) -> None:
    """Set log level for a specific logger, or the root logger when None."""
    logging.getLogger(logger_name).setLevel(level.upper())
