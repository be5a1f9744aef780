"""File handler whose rollover is performed by the rotation engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ..config.schema import RotationSettings
from ..core.rotation import Rotation

__all__ = [
    "FileHandlerConfig",
    "CyclingFileHandler",
    "build_file_handler",
]


@dataclass(slots=True)
class FileHandlerConfig:
    """Aggregate configuration for file handlers."""

    filename: Path
    max_bytes: int = 10_000_000
    rotation: RotationSettings | None = None
    encoding: str | None = "utf-8"
    delay: bool = False

    def __post_init__(self) -> None:
        self.filename = Path(self.filename)
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")


class CyclingFileHandler(RotatingFileHandler):
    """Size based rollover into ``name.1``, ``name.2``, ... through :class:`Rotation`.

    Unlike :class:`RotatingFileHandler`, the history honours the engine's
    retention count and compression, and a failed rotation leaves the
    stream writing to the same file instead of losing records.
    """

    def __init__(
        self,
        filename: str | Path,
        *,
        max_bytes: int,
        rotation: Rotation | None = None,
        encoding: str | None = "utf-8",
        delay: bool = False,
    ) -> None:
        super().__init__(
            filename=str(filename),
            maxBytes=max_bytes,
            backupCount=0,
            encoding=encoding,
            delay=delay,
        )
        self.rotation = rotation or Rotation()

    def doRollover(self) -> None:  # type: ignore[override]
        if self.stream:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]
        self.rotation.rotate(self.baseFilename)
        if not self.delay:
            self.stream = self._open()


def build_file_handler(config: FileHandlerConfig) -> logging.Handler:
    """Create a file handler based on ``config``."""

    config.filename.parent.mkdir(parents=True, exist_ok=True)
    rotation = Rotation.from_settings(config.rotation or RotationSettings())
    return CyclingFileHandler(
        config.filename,
        max_bytes=config.max_bytes,
        rotation=rotation,
        encoding=config.encoding,
        delay=config.delay,
    )
