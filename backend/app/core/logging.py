"""Logging setup shared by the API process and the scheduler worker."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from app.core.context import get_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(request_id)s | %(message)s"

# Libraries that are noisy at INFO; they follow the app level only when debugging.
_QUIET_LOGGERS = ("sqlalchemy.engine", "apscheduler", "opik")


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request (or job) that produced it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def build_logging_config(log_level: str) -> Dict[str, Any]:
    level = log_level.upper()
    library_level = "DEBUG" if level == "DEBUG" else "WARNING"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_id": {"()": RequestIdFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
                "filters": ["request_id"],
            }
        },
        "loggers": {name: {"level": library_level} for name in _QUIET_LOGGERS},
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Configure logging once per process; later calls are ignored."""
    if getattr(configure_logging, "_configured", False):
        return
    dictConfig(build_logging_config(log_level))
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
    setattr(configure_logging, "_configured", True)
