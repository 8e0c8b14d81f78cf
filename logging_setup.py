"""
Shared logging infrastructure for the darkroom timer.

This module provides a unified logging setup for the timer core, the
announcer and the control plane.

Features:
- JSON-formatted structured logs
- Configurable log levels
- Run ID correlation across all logs of one process run
- Component and severity tagging
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Component(str, Enum):
    """System components for log tagging."""
    TIMER_CORE = "timer_core"
    ANNOUNCER = "announcer"
    LIGHT_CONTROLLER = "light_controller"
    CONTROL_PLANE = "control_plane"
    RUN_MANAGER = "run_manager"
    SERVER = "server"


# LogRecord attributes that are not structured fields
_RECORD_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "component", "run_id", "message",
])


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Each line carries:
    - ISO8601 timestamp
    - Severity level
    - Component identifier
    - Run ID (if available in extra)
    - Message and additional fields
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname.lower(),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }

        if hasattr(record, "run_id"):
            log_data["run_id"] = record.run_id

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class StructuredLogger:
    """
    Wrapper around Python's logging with structured JSON output.

    Usage:
        logger = StructuredLogger("run_manager", run_id="run_123")
        logger.info("Step started", step="Dev")
        logger.error("Run failed", error="details")
    """

    def __init__(
        self,
        component: str | Component,
        run_id: Optional[str] = None,
        logger_name: Optional[str] = None
    ):
        self.component = component.value if isinstance(component, Component) else component
        self.run_id = run_id
        self.logger = logging.getLogger(logger_name or self.component)

    def _log(self, level: int, message: str, **kwargs):
        """Internal logging method with structured data."""
        exc_info = kwargs.pop("exc_info", None)
        stack_info = kwargs.pop("stack_info", None)
        stacklevel = kwargs.pop("stacklevel", 1)

        extra = {
            "component": self.component,
            **kwargs
        }

        if self.run_id:
            extra["run_id"] = self.run_id

        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            stack_info=stack_info,
            stacklevel=stacklevel,
            extra=extra
        )

    def debug(self, message: str, **kwargs):
        """Log a debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log an info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log a warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log an error message."""
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log a critical message."""
        self._log(logging.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log an error message with exception info."""
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, message, **kwargs)

    def with_run(self, run_id: str) -> "StructuredLogger":
        """Create a new logger instance bound to a run ID."""
        return StructuredLogger(
            self.component,
            run_id=run_id,
            logger_name=self.logger.name
        )


def setup_logging(
    level: str = "INFO",
    use_json: bool = True,
    include_timestamp: bool = True
) -> None:
    """
    Configure root logger for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: Use JSON formatter (True) or simple text (False)
        include_timestamp: Include timestamps in text logs

    This should be called once at application startup.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)

    if use_json:
        formatter = JSONFormatter()
    else:
        format_str = "%(levelname)s - %(component)s - %(message)s"
        if include_timestamp:
            format_str = "%(asctime)s - " + format_str
        formatter = logging.Formatter(format_str, defaults={"component": "unknown"})

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)


def get_logger(
    component: str | Component,
    run_id: Optional[str] = None
) -> StructuredLogger:
    """
    Get a structured logger for a component.

    Example:
        logger = get_logger(Component.RUN_MANAGER, run_id="run_123")
        logger.info("Run started")
    """
    return StructuredLogger(component, run_id=run_id)
