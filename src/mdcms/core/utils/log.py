"""Structured logging setup"""

import logging
import sys
from typing import Any

import structlog


VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, not once at configure time
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING") -> None:
    """
    Configure structlog to write human-readable lines to stderr.

    Log levels:
    - DEBUG: per-line parser decisions, per-file scan progress
    - INFO: store lifecycle (load/persist), page creation and deletion
    - WARNING: documents that degraded to error placeholders
    - ERROR: operation failures

    Unknown level names fall back to WARNING.
    """
    level = level.upper()
    if level not in VALID_LEVELS:
        level = "WARNING"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a structured logger; `name` is typically the caller's __name__."""
    return structlog.get_logger(name)
