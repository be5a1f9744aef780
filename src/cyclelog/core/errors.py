"""Error types raised by the rotation engine."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path

__all__ = [
    "FailureCode",
    "RotationFailed",
    "RotationAssertionError",
    "ConfigurationError",
]


class FailureCode(IntEnum):
    """Stable numeric codes, one per failure site."""

    NOT_A_FILE = 10
    TEMP_FILE = 19
    OPEN = 20
    COPY = 22
    MOVE = 22
    TRUNCATE = 23
    GENERATION = 30
    PLACEMENT = 31
    COMPRESSION = 40


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


class RotationFailed(Exception):
    """A rotation step failed.

    ``filename`` is the file being worked on when the step failed. When a
    temporary copy had to be kept to avoid losing data, ``preserved`` points
    at it.
    """

    def __init__(
        self,
        message: str = "",
        code: int = 0,
        filename: str | Path | None = None,
        *,
        preserved: str | Path | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.filename = str(filename) if filename is not None else ""
        self.preserved = str(preserved) if preserved is not None else None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RotationAssertionError(AssertionError):
    """The archived path differs from the one configured with ``assert_on_success``."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"expected rotation to produce {expected!r}, got {actual!r}")
        self.expected = expected
        self.actual = actual
