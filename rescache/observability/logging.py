"""Structured logging configuration using structlog.

Embedding services call ``setup_logging`` once at startup; library code only
ever calls ``get_logger`` and never configures structlog itself.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "info", json_output: bool = True) -> None:
    """Configure structlog for stderr output.

    JSON lines by default; ``json_output=False`` switches to the console
    renderer for local debugging.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **initial: object) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name and optional extra context."""
    return structlog.get_logger(component=component, **initial)  # type: ignore[return-value]
