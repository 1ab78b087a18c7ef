"""Structured logging setup for the cluster DNS scenario.

Modules obtain loggers with ``structlog.get_logger(__name__)`` and log events
with key/value context (``namespace=``, ``pod=``). configure_logging() is
called once by the CLI; under pytest structlog's defaults are used unless a
test configures it.

Example:
    >>> configure_logging(log_level="DEBUG", json_output=False)
    >>> log = structlog.get_logger()
    >>> log.info("backend_created", namespace="dnsexample0")
"""

from __future__ import annotations

import logging
import sys

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
) -> None:
    """Configure structlog processors and level filtering.

    Args:
        log_level: The minimum log level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, render events as JSON lines. If False, use the
            console renderer.

    Raises:
        ValueError: If log_level is not a known level name.
    """
    level_name = log_level.upper()
    if level_name not in LOG_LEVELS:
        msg = f"Unknown log level: {log_level!r}. Expected one of {', '.join(LOG_LEVELS)}"
        raise ValueError(msg)

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


__all__ = [
    "LOG_LEVELS",
    "configure_logging",
]
