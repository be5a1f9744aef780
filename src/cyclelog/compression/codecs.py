"""Stateless compression transforms applied to archived generations."""

from __future__ import annotations

import bz2
import gzip
import logging
import lzma
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable

from ..core.errors import FailureCode, RotationFailed

__all__ = ["Codec", "GZIP", "BZIP2", "XZ"]

logger = logging.getLogger("cyclelog.compression")

Opener = Callable[[IO[bytes], int], IO[bytes]]


def _open_gzip(raw: IO[bytes], level: int) -> IO[bytes]:
    # mtime=0 keeps the output independent of the time of compression
    return gzip.GzipFile(fileobj=raw, mode="wb", compresslevel=level, mtime=0)


def _open_bz2(raw: IO[bytes], level: int) -> IO[bytes]:
    return bz2.BZ2File(raw, mode="wb", compresslevel=level)


def _open_xz(raw: IO[bytes], level: int) -> IO[bytes]:
    return lzma.LZMAFile(raw, mode="wb", preset=level)


@dataclass(slots=True, frozen=True)
class Codec:
    """A compression codec producing ``<path><extension>``."""

    name: str
    extension: str
    default_level: int
    min_level: int
    max_level: int
    opener: Opener

    def resolve_level(self, level: int | None) -> int:
        if level is None or level == -1:
            return self.default_level
        if not self.min_level <= level <= self.max_level:
            raise ValueError(
                f"{self.name} level must be between {self.min_level} and {self.max_level}, got {level}"
            )
        return level

    def target_for(self, path: str | Path) -> Path:
        path = Path(path)
        return path.with_name(path.name + self.extension)

    def handler(self, path: str | Path, level: int | None = None) -> Path:
        """Compress ``path`` next to itself and remove the source.

        The archive is written under a temporary name and renamed into place,
        so a failure never leaves a partial archive behind and the source is
        only removed once the archive is complete.
        """

        source = Path(path)
        target = self.target_for(source)
        try:
            resolved = self.resolve_level(level)
        except ValueError as exc:
            raise RotationFailed(str(exc), FailureCode.COMPRESSION, source) from exc

        temporary: Path | None = None
        try:
            fd, name = tempfile.mkstemp(dir=source.parent, prefix=f".{source.name}.", suffix=".tmp")
            temporary = Path(name)
            with os.fdopen(fd, "wb") as raw, source.open("rb") as src:
                with self.opener(raw, resolved) as dst:
                    shutil.copyfileobj(src, dst)
            os.replace(temporary, target)
            temporary = None
            source.unlink()
        except OSError as exc:
            raise RotationFailed(
                f"the file {source} cannot be compressed to {target}: {exc.strerror or exc}",
                FailureCode.COMPRESSION,
                source,
            ) from exc
        finally:
            if temporary is not None:
                temporary.unlink(missing_ok=True)

        logger.debug("compressed %s to %s with %s level %s", source, target, self.name, resolved)
        return target


GZIP = Codec(name="gzip", extension=".gz", default_level=6, min_level=1, max_level=9, opener=_open_gzip)
BZIP2 = Codec(name="bz2", extension=".bz2", default_level=9, min_level=1, max_level=9, opener=_open_bz2)
XZ = Codec(name="xz", extension=".xz", default_level=6, min_level=0, max_level=9, opener=_open_xz)
