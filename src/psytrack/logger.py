"""Structured logging configuration using *structlog*.

Library modules only call ``structlog.get_logger(__name__)`` and log dotted
event names (``alerts.fired``, ``capsule.imported`` ...).  Applications call
:func:`setup_logging` once.
"""

from __future__ import annotations

import logging
import sys

import structlog


def _renderer(json_output: bool | None) -> structlog.typing.Processor:
    if json_output is None:
        json_output = not sys.stderr.isatty()
    return structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()


def setup_logging(level: str = "INFO", *, json_output: bool | None = None) -> None:
    """Route psytrack events to stderr at *level*.

    ``json_output`` defaults to JSON lines unless stderr is a terminal.
    """
    threshold = logging.getLevelName(level.upper())
    if not isinstance(threshold, int):
        threshold = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
