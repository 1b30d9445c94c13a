"""structlog configuration for processes embedding the scoring engine."""

from __future__ import annotations

import logging
from typing import Optional

import structlog

from ecoscore.config import get_log_level


def configure_logging(level: Optional[str] = None, json_output: bool = False) -> None:
    """
    Configure structlog once at process start.

    Args:
        level: Log level name, defaults to LOG_LEVEL (INFO)
        json_output: Render JSON lines instead of the console renderer
    """
    level_name = (level or get_log_level()).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
