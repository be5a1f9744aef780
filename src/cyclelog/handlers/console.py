"""Console handler for rotation events."""

from __future__ import annotations

import logging
import sys

from ..core.errors import ConfigurationError

__all__ = ["STREAMS", "build_console_handler"]

STREAMS = ("stdout", "stderr")


def build_console_handler(
    stream: str = "stderr",
    *,
    level: int = logging.INFO,
    formatter: logging.Formatter | None = None,
) -> logging.Handler:
    """Construct a :class:`logging.StreamHandler` writing to ``sys.<stream>``.

    The stream is looked up when the handler is built so redirected
    ``sys.stdout``/``sys.stderr`` objects are honoured.
    """

    if stream not in STREAMS:
        raise ConfigurationError(f"Unknown log stream '{stream}', expected one of: {', '.join(STREAMS)}")
    handler = logging.StreamHandler(stream=getattr(sys, stream))
    handler.setLevel(level)
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler
