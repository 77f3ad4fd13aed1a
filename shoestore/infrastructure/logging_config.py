"""Structured logging setup.

Configures structlog with the level from settings and request-scoped
context variables (request ID is bound by the request middleware).
"""

import logging

import structlog

from shoestore.infrastructure.config import settings


def configure_logging(log_level: str | None = None) -> None:
    """Configure structlog processors and level filtering.

    Args:
        log_level: Override for the configured log level.
    """
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
