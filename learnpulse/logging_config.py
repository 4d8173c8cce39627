"""
Central logging configuration for LearnPulse.

Provides:
- Structured logging (JSON in production, human-readable in development)
- Request and learner correlation via contextvars
- Environment-aware log levels

Usage:
    from learnpulse.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Engagement captured", extra={"resource_id": resource_id, "seconds": 12})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

# Set by RequestIdMiddleware for the lifetime of a request
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
# Set once the bearer credential has been resolved to a learner
learner_id_var: ContextVar[Optional[str]] = ContextVar("learner_id", default=None)

_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "request_id", "learner_id",
))


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, if set."""
    return request_id_var.get()


class ContextFilter(logging.Filter):
    """Copy request_id and learner_id from context onto every record.

    An explicit learner_id passed via extra= wins over the context value.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        if not getattr(record, "learner_id", None):
            record.learner_id = learner_id_var.get() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for production log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in ("request_id", "learner_id"):
            value = getattr(record, attr, None)
            if value and value != "-":
                log_obj[attr] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Anything passed via extra= in the log call
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj)


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s learner=%(learner_id)s %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'development' or 'production'
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates on reload
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())

    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(_create_dev_formatter())

    root.addHandler(handler)

    # Reduce noise from third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Records pick up request_id and learner_id from context once the handler
    installed by configure_logging() is active.
    """
    return logging.getLogger(name)
