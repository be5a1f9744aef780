"""Rotation engine: detach the live file, shift the history, compress."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List

from ..compression.registry import DEFAULT_CODEC, get_codec
from ..utils.sizes import parse_size
from . import detach
from .errors import ConfigurationError, FailureCode, RotationAssertionError, RotationFailed
from .generations import GenerationProcessor

if TYPE_CHECKING:
    from ..config.schema import RotationSettings

__all__ = [
    "RotationRequest",
    "RotationOutcome",
    "Rotation",
    "SuccessCallback",
    "FailureCallback",
]

logger = logging.getLogger("cyclelog.rotation")

SuccessCallback = Callable[[str], None]
FailureCallback = Callable[[RotationFailed], None]


@dataclass(slots=True, frozen=True)
class RotationRequest:
    """Snapshot of the engine configuration for a single ``rotate`` call."""

    target: Path
    min_size: int = 0
    truncate: bool = False
    compress: bool = False
    compress_level: int | None = None
    codec: str = DEFAULT_CODEC
    files: int | None = None
    expected: str | None = None


@dataclass(slots=True)
class RotationOutcome:
    """Result of the most recent ``rotate`` call."""

    succeeded: bool = False
    archived: str | None = None
    failure: RotationFailed | None = None


class Rotation:
    """Rotate a log file into a numbered, optionally compressed history.

    Configuration methods return the engine so calls can be chained::

        Rotation().files(5).compress().truncate().rotate("app.log")

    ``rotate`` reports I/O failures through its return value, the
    :attr:`failure` attribute and any ``on_failure`` callbacks; it only
    raises when the result does not match :meth:`assert_on_success`.
    """

    def __init__(self) -> None:
        self._files: int | None = None
        self._min_size = 0
        self._truncate = False
        self._compress = False
        self._compress_level: int | None = None
        self._codec = DEFAULT_CODEC
        self._expected: str | None = None
        self._on_success: List[SuccessCallback] = []
        self._on_failure: List[FailureCallback] = []
        self._outcome = RotationOutcome()

    @classmethod
    def from_settings(cls, settings: "RotationSettings") -> "Rotation":
        """Build an engine configured from loaded rotation settings."""

        rotation = cls().truncate(settings.truncate).min_size(settings.min_size)
        if settings.files is not None:
            rotation.files(settings.files)
        if settings.compress:
            # A configured level 0 is the codec level 0 (xz preset 0), not "off".
            rotation._codec = get_codec(settings.codec).name
            rotation._compress = True
            level = settings.compress_level
            rotation._compress_level = None if level in (None, -1) else level
        return rotation

    # -- Configuration -------------------------------------------------------
    def files(self, count: int) -> "Rotation":
        """Keep at most ``count`` rotated generations."""

        if count < 0:
            raise ConfigurationError(f"files must be >= 0, got {count}")
        self._files = count
        return self

    def compress(self, level: int | None = -1, codec: str | None = None) -> "Rotation":
        """Compress archived generations.

        ``-1`` or ``None`` selects the codec default level, ``0`` disables
        compression.
        """

        if codec is not None:
            self._codec = get_codec(codec).name
        self._compress = level != 0
        self._compress_level = None if level in (None, -1) else level
        return self

    def truncate(self, enabled: bool = True) -> "Rotation":
        """Copy the live file and truncate it in place instead of moving it.

        For writers that cannot be told to reopen their log file and keep
        appending to the same descriptor.
        """

        self._truncate = enabled
        return self

    def min_size(self, size: int | str) -> "Rotation":
        """Only rotate files larger than ``size`` bytes."""

        try:
            parsed = parse_size(size)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if parsed < 0:
            raise ConfigurationError(f"min_size must be >= 0, got {size}")
        self._min_size = parsed
        return self

    def assert_on_success(self, expected: str | Path) -> "Rotation":
        self._expected = str(expected)
        return self

    def on_success(self, callback: SuccessCallback) -> "Rotation":
        self._on_success.append(callback)
        return self

    def on_failure(self, callback: FailureCallback) -> "Rotation":
        self._on_failure.append(callback)
        return self

    def request(self, path: str | Path) -> RotationRequest:
        return RotationRequest(
            target=Path(path),
            min_size=self._min_size,
            truncate=self._truncate,
            compress=self._compress,
            compress_level=self._compress_level,
            codec=self._codec,
            files=self._files,
            expected=self._expected,
        )

    # -- Outcome -------------------------------------------------------------
    @property
    def outcome(self) -> RotationOutcome:
        return self._outcome

    @property
    def failure(self) -> RotationFailed | None:
        return self._outcome.failure

    def is_successful(self) -> bool:
        return self._outcome.succeeded

    def archived_filename(self) -> str | None:
        return self._outcome.archived

    # -- Rotation ------------------------------------------------------------
    def rotate(self, path: str | Path) -> bool:
        """Rotate ``path``; return ``True`` if a new generation was archived."""

        request = self.request(path)
        self._outcome = RotationOutcome()

        try:
            archived = self._run(request)
        except RotationFailed as failure:
            self._fail(failure)
            return False

        if archived is None:
            return False

        self._finish(request, str(archived))
        return True

    def _run(self, request: RotationRequest) -> Path | None:
        if not self._eligible(request):
            return None

        target = request.target
        temporary = detach.copy_and_truncate(target) if request.truncate else detach.move(target)

        codec = get_codec(request.codec) if request.compress else None
        processor = GenerationProcessor(target, files=request.files)
        if codec is not None:
            processor.add_extension(codec.extension)

        try:
            archived = processor.handler(temporary)
        except RotationFailed as failure:
            self._preserve(request, temporary, failure)
            raise

        if codec is not None:
            archived = codec.handler(archived, request.compress_level)
        return archived

    def _eligible(self, request: RotationRequest) -> bool:
        target = request.target
        try:
            status = target.stat()
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("nothing to rotate, %s does not exist", target, extra={"target": str(target)})
            return False
        except OSError as exc:
            raise RotationFailed(
                f"the file {target} cannot be inspected: {exc.strerror or exc}", FailureCode.OPEN, target
            ) from exc
        if not stat.S_ISREG(status.st_mode):
            raise RotationFailed(f"the file {target} is not a regular file", FailureCode.NOT_A_FILE, target)
        size = status.st_size
        if size <= request.min_size:
            logger.debug(
                "nothing to rotate, %s is %d bytes (minimum %d)",
                target,
                size,
                request.min_size,
                extra={"target": str(target)},
            )
            return False
        return True

    def _preserve(self, request: RotationRequest, temporary: Path, failure: RotationFailed) -> None:
        # The temp file holds the only copy of the detached content.
        if not temporary.exists():
            return
        if not request.truncate and not request.target.exists():
            try:
                os.replace(temporary, request.target)
            except OSError as exc:
                logger.warning("could not restore %s from %s: %s", request.target, temporary, exc)
            else:
                logger.warning("restored %s after a failed rotation", request.target)
                failure.preserved = None
                return
        failure.preserved = str(temporary)

    def _fail(self, failure: RotationFailed) -> None:
        self._outcome.succeeded = False
        self._outcome.failure = failure
        logger.error(
            "rotation of %s failed: %s",
            failure.filename or "-",
            failure,
            extra={"target": failure.filename, "code": int(failure.code)},
        )
        if failure.preserved:
            logger.warning(
                "detached content kept in %s", failure.preserved, extra={"target": failure.filename}
            )
        for callback in self._on_failure:
            callback(failure)

    def _finish(self, request: RotationRequest, archived: str) -> None:
        self._outcome.archived = archived
        if request.expected is not None and request.expected != archived:
            raise RotationAssertionError(request.expected, archived)

        self._outcome.succeeded = True
        logger.info("rotated %s to %s", request.target, archived, extra={"target": str(request.target)})
        for callback in self._on_success:
            callback(archived)
