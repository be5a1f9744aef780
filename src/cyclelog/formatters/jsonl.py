"""JSON Lines formatter."""

from __future__ import annotations

import json
import logging
from typing import Any, MutableMapping

__all__ = ["JSONLinesFormatter"]

_REPORTED_ATTRS = ("target", "code")


class JSONLinesFormatter(logging.Formatter):
    """Emit rotation events as one JSON object per line."""

    def __init__(self, *, datefmt: str | None = "%Y-%m-%dT%H:%M:%S%z") -> None:
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: MutableMapping[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in _REPORTED_ATTRS:
            value = record.__dict__.get(key)
            if value is not None and value != "":
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
