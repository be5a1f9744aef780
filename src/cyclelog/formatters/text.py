"""Human readable text formatter for rotation reports."""

from __future__ import annotations

import logging

__all__ = ["RotationTextFormatter"]

_DEFAULT_FMT = "%(asctime)s | %(levelname)-5s | %(name)s | %(target)s | %(message)s"
_DEFAULT_FMT_WITH_CODE = "%(asctime)s | %(levelname)-5s | %(name)s | %(target)s | %(message)s | code=%(code)s"


class RotationTextFormatter(logging.Formatter):
    """Formatter that always has a ``target`` column, and a ``code`` one when asked."""

    def __init__(self, *, show_code: bool = False, fmt: str | None = None, datefmt: str | None = "%Y-%m-%d %H:%M:%S") -> None:
        final_fmt = fmt or (_DEFAULT_FMT_WITH_CODE if show_code else _DEFAULT_FMT)
        super().__init__(final_fmt, datefmt=datefmt)
        self.show_code = show_code

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        record.__dict__.setdefault("target", "-")
        record.__dict__.setdefault("code", "-")
        return super().format(record)
