"""
Logging configuration module.

Provides console logging for development and JSON logging (for log
aggregation) selected by settings.log_format. Every record carries the
request ID set by RequestIDMiddleware.
"""

import contextvars
import logging
import logging.config
import sys
from typing import Any

from user_service.core.config import Settings

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="no-request-id"
)


def setup_logging(settings: Settings) -> None:
    """
    Configure application logging.

    Call this at application startup, before any logging occurs.
    """
    logging.config.dictConfig(get_logging_config(settings))

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={settings.log_level}, format={settings.log_format}"
    )


def get_logging_config(settings: Settings) -> dict[str, Any]:
    """
    Get logging configuration dictionary.

    Returns:
        Dictionary compatible with logging.config.dictConfig()
    """
    formatter = "json" if settings.log_format == "json" else "detailed"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": (
                    "%(asctime)s - %(name)s - %(levelname)s - "
                    "[%(request_id)s] - %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": (
                    "%(asctime)s %(name)s %(levelname)s %(request_id)s "
                    "%(filename)s %(lineno)d %(funcName)s %(message)s"
                ),
            },
        },
        "filters": {
            "request_id": {
                "()": RequestIdFilter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": sys.stdout,
                "filters": ["request_id"],
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console"],
        },
        "loggers": {
            name: {"level": level, "handlers": ["console"], "propagate": False}
            for name, level in _logger_levels(settings).items()
        },
    }


def _logger_levels(settings: Settings) -> dict[str, str]:
    return {
        "uvicorn": "INFO",
        # RequestLoggingMiddleware logs requests without their query strings,
        # which carry passwords; the access log would not
        "uvicorn.access": "WARNING",
        # DEBUG=true turns on statement echo through the engine instead
        "sqlalchemy.engine": "WARNING",
        "user_service": settings.log_level,
    }


class RequestIdFilter(logging.Filter):
    """Add the current request ID to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True
