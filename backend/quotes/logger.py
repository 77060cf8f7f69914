"""
Logging setup using structlog on top of the stdlib logging module.
"""

from __future__ import annotations

import logging
import sys

import structlog

from quotes.config.settings import settings


def configure_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: 'json' or 'console'
    """
    level = log_level or settings.log_level
    format_type = log_format or settings.log_format
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if format_type == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_context) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
