"""Centralized logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from family_scheduler.core.context import get_conversation_id, get_request_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s | conv=%(conversation_id)s | %(message)s"

# Modules whose DEBUG output explains how a model reply was parsed.
PARSING_LOGGERS = (
    "family_scheduler.services.json_recovery",
    "family_scheduler.services.schedule_normalizer",
    "family_scheduler.services.schedule_pipeline",
)

# HTTP client internals log every upstream request; keep them quiet unless something breaks.
NOISY_LOGGERS = ("httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    """Stamp each record with the current request and conversation ids."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - minimal logic
        record.request_id = get_request_id() or "-"
        record.conversation_id = get_conversation_id() or "-"
        return True


def build_logging_config(log_level: str, *, debug: bool = False) -> Dict[str, Any]:
    loggers: Dict[str, Any] = {name: {"level": "WARNING"} for name in NOISY_LOGGERS}
    if debug:
        loggers.update({name: {"level": "DEBUG"} for name in PARSING_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_context": {"()": "family_scheduler.core.logging.RequestIdFilter"}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": "DEBUG" if debug else log_level,
                "filters": ["request_context"],
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": log_level},
    }


def configure_logging(*, log_level: str = "INFO", debug: bool = False) -> None:
    """Configure application logging once at startup."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(build_logging_config(log_level, debug=debug))
    logging.getLogger(__name__).debug("Logging configured at %s (debug=%s)", log_level, debug)
    setattr(configure_logging, "_configured", True)
