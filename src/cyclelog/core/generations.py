"""Numbered history (``file.log.1``, ``file.log.2``, ...) for one base file."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from .errors import ConfigurationError, FailureCode, RotationFailed

__all__ = ["Generation", "GenerationProcessor"]

logger = logging.getLogger("cyclelog.generations")


@dataclass(slots=True, frozen=True)
class Generation:
    """One archived file on disk."""

    number: int
    path: Path
    suffix: str = ""


class GenerationProcessor:
    """Shift the history of ``source`` up by one and place a new generation 1.

    The set of generations is read from disk on every call. Both the bare
    ``F.n`` and the suffixed ``F.n<ext>`` variants are tracked, so an
    uncompressed leftover is shifted along with the compressed history
    instead of being overwritten.
    """

    def __init__(self, source: str | Path, *, files: int | None = None) -> None:
        self._source = Path(source)
        self._max_files: int | None = None
        self._extension = ""
        if files is not None:
            self.files(files)

    # ------------------------------------------------------------------
    def files(self, count: int) -> "GenerationProcessor":
        """Keep at most ``count`` generations (``0`` keeps only the newest)."""

        if count < 0:
            raise ConfigurationError(f"files must be >= 0, got {count}")
        self._max_files = count
        return self

    def add_extension(self, extension: str) -> "GenerationProcessor":
        self._extension = _normalize(extension)
        return self

    def remove_extension(self, extension: str) -> "GenerationProcessor":
        if self._extension == _normalize(extension):
            self._extension = ""
        return self

    @property
    def source(self) -> Path:
        return self._source

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def limit(self) -> int | None:
        if self._max_files is None:
            return None
        return max(self._max_files, 1)

    def generation_path(self, number: int, suffix: str = "") -> Path:
        return self._source.with_name(f"{self._source.name}.{number}{suffix}")

    # ------------------------------------------------------------------
    def existing(self) -> Dict[int, List[Generation]]:
        """Return the generations currently on disk keyed by number."""

        directory = self._source.parent
        suffix = f"(?P<suffix>{re.escape(self._extension)})?" if self._extension else "(?P<suffix>)"
        pattern = re.compile(rf"^{re.escape(self._source.name)}\.(?P<number>[1-9][0-9]*){suffix}$")

        found: Dict[int, List[Generation]] = {}
        try:
            if not directory.is_dir():
                return {}
            for entry in directory.iterdir():
                match = pattern.match(entry.name)
                if match is None or not entry.is_file():
                    continue
                number = int(match.group("number"))
                found.setdefault(number, []).append(
                    Generation(number=number, path=entry, suffix=match.group("suffix") or "")
                )
        except OSError as exc:
            raise RotationFailed(
                f"the directory {directory} cannot be listed: {exc.strerror or exc}",
                FailureCode.GENERATION,
                directory,
            ) from exc
        return found

    def handler(self, archived: str | Path) -> Path:
        """Shift the history and move ``archived`` into place as generation 1."""

        archived = Path(archived)
        self._shift(self.existing())

        target = self.generation_path(1)
        try:
            os.replace(archived, target)
        except OSError as exc:
            raise RotationFailed(
                f"the file {archived} cannot be renamed to {target}: {exc.strerror or exc}",
                FailureCode.PLACEMENT,
                archived,
                preserved=archived,
            ) from exc
        logger.debug("placed %s as %s", archived, target)
        return target

    # ------------------------------------------------------------------
    def _shift(self, generations: Dict[int, List[Generation]]) -> None:
        # Generation k goes to slot k+1; gaps are closed by compacting to 2, 3, ...
        plan = [(number, slot) for slot, number in enumerate(sorted(generations), start=2)]
        limit = self.limit

        kept: List[tuple[int, int]] = []
        for number, slot in reversed(plan):
            if limit is not None and slot > limit:
                for generation in generations[number]:
                    self._evict(generation)
            else:
                kept.append((number, slot))

        upward = [(number, slot) for number, slot in kept if slot > number]
        downward = sorted((number, slot) for number, slot in kept if slot < number)
        for number, slot in upward + downward:
            for generation in generations[number]:
                self._rename(generation, slot)

    def _evict(self, generation: Generation) -> None:
        try:
            generation.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise RotationFailed(
                f"the file {generation.path} cannot be removed: {exc.strerror or exc}",
                FailureCode.GENERATION,
                generation.path,
            ) from exc
        logger.debug("evicted %s", generation.path)

    def _rename(self, generation: Generation, slot: int) -> None:
        target = self.generation_path(slot, generation.suffix)
        try:
            os.replace(generation.path, target)
        except OSError as exc:
            raise RotationFailed(
                f"the file {generation.path} cannot be renamed to {target}: {exc.strerror or exc}",
                FailureCode.GENERATION,
                generation.path,
            ) from exc
        logger.debug("shifted %s to %s", generation.path, target)


def _normalize(extension: str) -> str:
    extension = extension.strip()
    if not extension:
        return ""
    return extension if extension.startswith(".") else f".{extension}"
