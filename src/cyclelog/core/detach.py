"""Detach the live log file into a temporary sibling, by move or by copy-and-truncate."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

import portalocker

from .errors import FailureCode, RotationFailed

__all__ = [
    "TEMP_PREFIX",
    "allocate_temp_file",
    "locked_source",
    "copy_and_truncate",
    "move",
    "discard",
]

TEMP_PREFIX = "LOG"

logger = logging.getLogger("cyclelog.rotation")


def allocate_temp_file(directory: Path) -> Path:
    """Create an empty, uniquely named file in ``directory`` and return its path."""

    try:
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    except OSError as exc:
        raise RotationFailed(
            f"the directory {directory} cannot hold a temp file: {exc.strerror or exc}",
            FailureCode.TEMP_FILE,
            directory,
        ) from exc
    os.close(fd)
    return Path(name)


def discard(path: Path) -> None:
    """Remove an abandoned temp file, logging instead of raising."""

    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not remove temp file %s: %s", path, exc)


@contextmanager
def locked_source(path: Path) -> Iterator[BinaryIO]:
    """Open ``path`` for reading under an exclusive advisory lock.

    The descriptor and the lock are released together on every exit path.
    """

    try:
        handle = open(path, "r+b")
    except OSError as exc:
        raise RotationFailed(
            f"the file {path} cannot be opened: {exc.strerror or exc}",
            FailureCode.OPEN,
            path,
        ) from exc

    try:
        try:
            portalocker.lock(handle, portalocker.LOCK_EX)
        except portalocker.LockException as exc:
            raise RotationFailed(
                f"the file {path} cannot be locked: {exc}",
                FailureCode.OPEN,
                path,
            ) from exc
        try:
            yield handle
        finally:
            portalocker.unlock(handle)
    finally:
        handle.close()


def copy_and_truncate(source: Path) -> Path:
    """Copy ``source`` into a temp sibling, then truncate ``source`` in place.

    If truncation fails after the copy succeeded, the copy is kept and its
    location is reported on the raised failure.
    """

    target = allocate_temp_file(source.parent)
    try:
        with locked_source(source) as src:
            try:
                with open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            except OSError as exc:
                raise RotationFailed(
                    f"the file {source} cannot be copied to temp file {target}: {exc.strerror or exc}",
                    FailureCode.COPY,
                    source,
                ) from exc
    except RotationFailed:
        discard(target)
        raise

    try:
        with open(source, "wb") as fh:
            fh.flush()
    except OSError as exc:
        raise RotationFailed(
            f"the file {source} cannot be truncated: {exc.strerror or exc}",
            FailureCode.TRUNCATE,
            source,
            preserved=target,
        ) from exc

    logger.debug("copied %s to %s and truncated the original", source, target)
    return target


def move(source: Path) -> Path:
    """Atomically rename ``source`` onto a fresh temp sibling."""

    target = allocate_temp_file(source.parent)
    try:
        os.replace(source, target)
    except OSError as exc:
        discard(target)
        raise RotationFailed(
            f"the file {source} cannot be moved to temp file {target}: {exc.strerror or exc}",
            FailureCode.MOVE,
            source,
        ) from exc

    logger.debug("moved %s to %s", source, target)
    return target
