"""Logging manager for the ``cyclelog`` logger namespace."""

from __future__ import annotations

import logging
from typing import Callable, Dict

from ..config.schema import LoggingSettings
from ..formatters.jsonl import JSONLinesFormatter
from ..formatters.text import RotationTextFormatter
from ..handlers.console import build_console_handler
from .levels import resolve_level

__all__ = ["LOGGER_NAME", "LogManager", "GLOBAL_MANAGER"]

LOGGER_NAME = "cyclelog"

FormatterBuilder = Callable[[], logging.Formatter]

FORMATTER_BUILDERS: Dict[str, FormatterBuilder] = {
    "text": lambda: RotationTextFormatter(show_code=True),
    "jsonl": JSONLinesFormatter,
}


def build_formatter(kind: str) -> logging.Formatter:
    builder = FORMATTER_BUILDERS.get(kind)
    if builder is None:
        raise ValueError(f"Unknown formatter kind: {kind}")
    return builder()


class LogManager:
    """Install and remove the console handler reporting rotation events."""

    def __init__(self) -> None:
        self._settings: LoggingSettings | None = None
        self._handler: logging.Handler | None = None

    @property
    def settings(self) -> LoggingSettings | None:
        return self._settings

    # ------------------------------------------------------------------
    def configure(self, settings: LoggingSettings) -> logging.Handler:
        """Apply ``settings`` to the ``cyclelog`` logger."""

        level = resolve_level(settings.level)
        handler = build_console_handler(
            settings.stream, level=level, formatter=build_formatter(settings.format)
        )
        self._teardown()

        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False

        self._settings = settings
        self._handler = handler
        return handler

    def shutdown(self) -> None:
        """Detach and close the installed handler."""

        self._teardown()
        self._settings = None

    # ------------------------------------------------------------------
    def _teardown(self) -> None:
        if self._handler is None:
            return
        logger = logging.getLogger(LOGGER_NAME)
        logger.removeHandler(self._handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
        try:
            self._handler.flush()
        except (OSError, ValueError):
            pass
        self._handler.close()
        self._handler = None


GLOBAL_MANAGER = LogManager()
