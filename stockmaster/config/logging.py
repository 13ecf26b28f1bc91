"""
structlog setup.

Console rendering in development, one JSON object per line elsewhere.
Quantities are Decimals throughout the ledger, so they are rendered as
plain strings rather than Decimal reprs.
"""

import logging
import sys
from decimal import Decimal
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from stockmaster.config.settings import Settings, get_settings

QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def _stamp_service(settings: Settings) -> Processor:
    service = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def stamp(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        for key, value in service.items():
            event_dict.setdefault(key, value)
        return event_dict

    return stamp


def render_decimals(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Decimal("2.50") logs as "2.50"."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def _renderer(settings: Settings) -> list[Processor]:
    if settings.environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger it writes through."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _stamp_service(settings),
        render_decimals,
        *_renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """Structured logger, optionally pre-bound with context such as operation_id."""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
