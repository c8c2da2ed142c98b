"""
Structured JSON logging utilities for the block service.

Provides JSON-lines log output for container platforms and log aggregators,
plus a logger adapter for per-request context.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as single-line JSON objects with consistent fields:
    - timestamp: ISO 8601 format in UTC
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - Additional context fields from extra dict
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Extra fields (excluding standard LogRecord attributes)
        standard_attrs = {
            "name", "msg", "args", "created", "filename", "funcName",
            "levelname", "levelno", "lineno", "module", "msecs",
            "pathname", "process", "processName", "relativeCreated",
            "stack_info", "exc_info", "exc_text", "thread", "threadName",
            "taskName", "message"
        }
        for key, value in record.__dict__.items():
            if key not in standard_attrs and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_obj[key] = value
                except (TypeError, ValueError):
                    log_obj[key] = str(value)

        return json.dumps(log_obj, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = None,
) -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        level: Logging level (default: INFO)
        logger_name: Specific logger to configure (default: root logger)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def configure_logging(level: str | int = logging.INFO, json_logs: bool = False) -> logging.Logger:
    """Configure the root logger as plain text or JSON lines."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if json_logs:
        return configure_structured_logging(level=level)

    logging.basicConfig(level=level, format=TEXT_LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)
    # aiohttp's access log is chatty at INFO
    logging.getLogger("aiohttp.access").setLevel(max(level, logging.WARNING))
    return root


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds request context to all log messages.

    Used by the HTTP handlers to tag records with method, path, cid and name.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add extra context to log record."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs
