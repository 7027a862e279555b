"""Structured logging configuration.

Upgrade steps and the chain runner log snake_case events with keyword
fields. structlog renders them as JSON lines; when it is not importable a
stdlib adapter keeps the same call signature.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_STRUCTLOG_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog or stdlib logger accepting ``event, **fields`` calls.
    """
    try:
        import structlog
    except ImportError:
        return _get_standard_logger(name)

    global _STRUCTLOG_CONFIGURED
    if not _STRUCTLOG_CONFIGURED:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            cache_logger_on_first_use=False,
        )
        _STRUCTLOG_CONFIGURED = True
    return structlog.get_logger(name)


def _get_standard_logger(name: str) -> Any:
    """Create a stdlib logger fallback with one stream handler."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return _StructuredStandardLogger(logger)


class _StructuredStandardLogger:
    """Stdlib logger adapter that accepts structured keyword fields."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(self, event: str, **fields: object) -> None:
        self._logger.debug(_format_event(event, fields))

    def info(self, event: str, **fields: object) -> None:
        self._logger.info(_format_event(event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self._logger.warning(_format_event(event, fields))

    def error(self, event: str, **fields: object) -> None:
        self._logger.error(_format_event(event, fields))


def _format_event(event: str, fields: dict[str, object]) -> str:
    """Render an event name and its fields as one JSON line."""
    if not fields:
        return event
    return json.dumps({"event": event, **fields}, sort_keys=True, default=str)
