"""Structured logging setup with structlog."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog for the bot process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL or INFO.
        json_logs: If True, output JSON; otherwise console-friendly. Defaults to LOG_JSON.

    Example:
        >>> setup_logging(level="DEBUG")
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if json_logs is None:
        json_logs = os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")
    numeric_level = getattr(logging, level, logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    # httpx logs every request line at INFO, which includes the bot token in the URL
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound logger for the given module name."""
    return structlog.get_logger(name)
