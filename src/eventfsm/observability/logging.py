"""structlog configuration for processes embedding eventfsm."""

from __future__ import annotations

import logging
import sys

import structlog

from eventfsm.config import get_settings


def configure_logging(production: bool | None = None) -> None:
    """Configure structlog for production (JSON) or development (console).

    Log lines go to stderr so they never mix with data a command writes to
    stdout, such as DOT source.

    Args:
        production: JSON rendering at INFO level if ``True``, colored console
            rendering at DEBUG level if ``False``.  Defaults to
            ``Settings.production``.
    """
    if production is None:
        production = get_settings().production

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        # Development runs may reconfigure; module-level loggers only cache in production.
        cache_logger_on_first_use=production,
    )

    structlog.contextvars.bind_contextvars(library="eventfsm")
