"""Structured logging configuration.

This module initializes structlog with a stable structured format.
Events are rendered as JSON and routed through stdlib logging handlers.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured output.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def configure_cli_logging(level: str = "INFO") -> None:
    """Attach a stderr handler for CLI runs.

    Args:
        level: Root log level name.
    """
    logging.basicConfig(level=level.upper(), format="%(message)s")
