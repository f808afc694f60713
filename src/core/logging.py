"""Structured logging configuration for the CRM adapter.

This module provides JSON-formatted logging suitable for production environments
and log aggregation systems (ELK, CloudWatch, etc.), plus a root-cause tagging
helper so every CRM failure line carries a machine-readable classification.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def __init__(
        self,
        *,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_path: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_path = include_path
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(UTC).isoformat()

        if self.include_level:
            log_data["level"] = record.levelname

        if self.include_logger:
            log_data["logger"] = record.name

        log_data["message"] = record.getMessage()

        if self.include_path:
            log_data["path"] = f"{record.pathname}:{record.lineno}"
            log_data["function"] = record.funcName

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields from record
        for key in ["method", "query", "status_code", "attempt", "root_cause", "error_type"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        log_data.update(self.extra_fields)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class PrettyFormatter(logging.Formatter):
    """Human-readable formatter for development/debugging."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors and structured info."""
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET

        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        level = f"{color}{record.levelname:8}{reset}"
        logger_name = record.name[:20].ljust(20)
        message = record.getMessage()

        output = f"{timestamp} | {level} | {logger_name} | {message}"

        if record.exc_info:
            output += f"\n{self.formatException(record.exc_info)}"

        return output


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    include_path: bool = False,
    service_name: str = "crm-adapter",
) -> None:
    """Configure logging for the application.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True) or pretty format (False)
        include_path: Include source file path in logs
        service_name: Service name to include in JSON logs
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        formatter = JSONFormatter(
            include_path=include_path,
            extra_fields={"service": service_name},
        )
    else:
        formatter = PrettyFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def safe_preview(value: Any, max_len: int = 120) -> str:
    """Return a safe string preview of value."""
    if value is None:
        return ""
    text = str(value)
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def log_with_root_cause(
    logger: logging.Logger,
    level: str,
    message: str,
    *,
    root_cause: str | None = None,
    **context: Any,
) -> None:
    """Log with root cause in [ROOT_CAUSE: ...] brackets.

    Args:
        logger: Logger instance to use
        level: Log level (debug, info, warning, error, critical)
        message: Base log message
        root_cause: Classification code, e.g. "CRM_NOT_FOUND"
        **context: Additional context fields (method, status_code, query, ...)

    Example:
        ```python
        log_with_root_cause(
            logger,
            "warning",
            "GET request failed with status: 404, error: Not found",
            root_cause="CRM_NOT_FOUND",
            status_code=404,
            method="GET",
        )
        # Output: "GET request failed ... [ROOT_CAUSE: CRM_NOT_FOUND]"
        ```
    """
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"

    extra = context.copy()
    if root_cause:
        message = f"{message} [ROOT_CAUSE: {root_cause}]"
        extra["root_cause"] = root_cause

    log_fn = getattr(logger, level.lower(), logger.info)
    log_fn(message, extra=extra)
