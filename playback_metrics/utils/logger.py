"""Structured JSON logging with correlation ID support.

Provides setup_logger(name, level) for consistent, queryable
log output across all playback-metrics modules.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger

# Context variable for request correlation IDs (thread/async-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_configured_loggers: set[str] = set()


def get_correlation_id() -> Optional[str]:
    """Get the current request correlation ID.

    Returns:
        The correlation ID string, or None if not set.
    """
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        cid: The correlation ID to set (typically a request ID).
    """
    correlation_id_var.set(cid)


class PlaybackMetricsJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that injects correlation ID and latency.

    Output format per line:
        {
            "timestamp": "2025-01-15T12:00:00.000Z",
            "level": "DEBUG",
            "module": "metrics.recorder",
            "message": "Playback start recorded",
            "correlation_id": "abc-123",
            "item_type": "movie",
            "play_mode": "transcode"
        }
    """

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        """Add custom fields to every log entry.

        Args:
            log_record: The output dict that will be serialized.
            record: The original LogRecord from Python logging.
            message_dict: Extra key-value pairs passed via `extra={}`.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["module"] = record.name

        cid = get_correlation_id()
        if cid:
            log_record["correlation_id"] = cid

        # Injected via extra={"latency_ms": value}
        if hasattr(record, "latency_ms"):
            log_record["latency_ms"] = record.latency_ms

        for field in ("levelname", "name", "asctime"):
            log_record.pop(field, None)


def setup_logger(
    name: str,
    level: str = "INFO",
) -> logging.Logger:
    """Create a structured JSON logger.

    Args:
        name: Logger name (typically module path, e.g. "metrics.recorder").
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        Configured Logger instance with JSON output to stdout.
    """
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)

    formatter = PlaybackMetricsJsonFormatter(
        fmt="%(timestamp)s %(level)s %(module)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    _configured_loggers.add(name)

    return logger


def set_log_level(level: str) -> None:
    """Apply a level to every logger created through setup_logger.

    Module loggers are created at import time, before settings are
    loaded; the app factory calls this once configuration is known.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    for name in _configured_loggers:
        logging.getLogger(name).setLevel(resolved)


def log_with_latency(
    logger: logging.Logger,
    message: str,
    latency_ms: float,
    level: str = "info",
    **kwargs: object,
) -> None:
    """Log a message with latency information attached.

    Args:
        logger: The logger instance to use.
        message: Log message text.
        latency_ms: Latency in milliseconds to include in the log entry.
        level: Log level string (default: "info").
        **kwargs: Additional key-value pairs for the log extra dict.
    """
    log_fn = getattr(logger, level.lower(), logger.info)
    log_fn(message, extra={"latency_ms": round(latency_ms, 2), **kwargs})
