"""Logging configuration.

Application modules log through ``structlog.get_logger(__name__)``;
this wires structlog onto the standard library so one level applies
everywhere.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Logs go to stderr so CLI output on stdout stays clean.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
