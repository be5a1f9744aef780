"""Configuration validation helpers."""

from __future__ import annotations

from pathlib import Path

from ..compression.registry import get_codec
from ..config.schema import CyclelogConfig, RotationSettings
from ..handlers.console import STREAMS
from .errors import ConfigurationError
from .levels import resolve_level

__all__ = ["ConfigurationError", "validate_configuration", "validate_rotation"]

_FORMATS = {"text", "jsonl"}


def validate_rotation(settings: RotationSettings, *, where: str = "rotation") -> None:
    """Ensure rotation settings describe a rotation that can run."""

    if settings.files is not None and settings.files < 0:
        raise ConfigurationError(f"'{where}.files' must be >= 0, got {settings.files}")
    if settings.min_size < 0:
        raise ConfigurationError(f"'{where}.min_size' must be >= 0, got {settings.min_size}")

    codec = get_codec(settings.codec)
    level = settings.compress_level
    if settings.compress and level is not None and level != -1:
        if not codec.min_level <= level <= codec.max_level:
            raise ConfigurationError(
                f"'{where}.compress.level' must be between {codec.min_level} and {codec.max_level} "
                f"for {codec.name}, got {level}"
            )


def validate_configuration(config: CyclelogConfig) -> None:
    """Ensure configuration values are consistent."""

    validate_rotation(config.rotation)

    if config.logging.format not in _FORMATS:
        raise ConfigurationError(
            f"Unknown log format '{config.logging.format}', expected one of: {', '.join(sorted(_FORMATS))}"
        )
    if config.logging.stream not in STREAMS:
        raise ConfigurationError(
            f"Unknown log stream '{config.logging.stream}', expected one of: {', '.join(STREAMS)}"
        )
    resolve_level(config.logging.level)

    seen: set[Path] = set()
    for index, target in enumerate(config.targets):
        if target.path == Path():
            raise ConfigurationError(f"Target #{index} has no path")
        if target.path in seen:
            raise ConfigurationError(f"Target '{target.path}' is defined more than once")
        seen.add(target.path)
        validate_rotation(target.rotation, where=f"targets[{target.path}]")
