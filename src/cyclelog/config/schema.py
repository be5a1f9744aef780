"""Configuration schema definition for cyclelog."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..utils.sizes import parse_size

DEFAULT_CONFIG: Dict[str, Any] = {
    "rotation": {
        "files": None,
        "min_size": 0,
        "truncate": False,
        "compress": {
            "enabled": False,
            "level": None,
            "codec": "gzip",
        },
    },
    "logging": {
        "level": "INFO",
        "stream": "stderr",
        "format": "text",
    },
    "targets": [],
}


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class RotationSettings:
    files: int | None = None
    min_size: int = 0
    truncate: bool = False
    compress: bool = False
    compress_level: int | None = None
    codec: str = "gzip"

    def merged(self, overrides: Mapping[str, Any]) -> "RotationSettings":
        """Return a copy with ``overrides`` (same shape as ``[rotation]``) applied."""

        if not overrides:
            return replace(self)
        return _to_rotation(overrides, base=self)


@dataclass(slots=True)
class LoggingSettings:
    level: str | int = "INFO"
    stream: str = "stderr"
    format: str = "text"


@dataclass(slots=True)
class TargetSpec:
    path: Path
    rotation: RotationSettings


@dataclass(slots=True)
class CyclelogConfig:
    rotation: RotationSettings
    logging: LoggingSettings
    targets: List[TargetSpec] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def target(self, path: str | Path) -> TargetSpec | None:
        wanted = Path(path)
        for spec in self.targets:
            if spec.path == wanted:
                return spec
        return None

    def settings_for(self, path: str | Path) -> RotationSettings:
        spec = self.target(path)
        return spec.rotation if spec is not None else self.rotation


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _to_rotation(data: Mapping[str, Any], *, base: RotationSettings | None = None) -> RotationSettings:
    settings = replace(base) if base is not None else RotationSettings()

    if "files" in data:
        settings.files = _optional_int(data.get("files"))
    if "min_size" in data:
        settings.min_size = parse_size(data.get("min_size") or 0)
    if "truncate" in data:
        settings.truncate = bool(data.get("truncate"))

    compress = data.get("compress")
    if isinstance(compress, Mapping):
        if "enabled" in compress:
            settings.compress = bool(compress.get("enabled"))
        if "level" in compress:
            settings.compress_level = _optional_int(compress.get("level"))
        if "codec" in compress:
            settings.codec = str(compress.get("codec") or "gzip")
    elif isinstance(compress, bool):
        settings.compress = compress
    return settings


def _to_logging(data: Mapping[str, Any]) -> LoggingSettings:
    return LoggingSettings(
        level=data.get("level", "INFO"),
        stream=str(data.get("stream", "stderr")),
        format=str(data.get("format", "text")).lower(),
    )


def _to_targets(data: Any, rotation: RotationSettings) -> List[TargetSpec]:
    targets: List[TargetSpec] = []
    if isinstance(data, Mapping):
        items = [{"path": key, **dict(value or {})} for key, value in data.items()]
    elif isinstance(data, list):
        items = data
    else:
        return targets

    for item in items:
        if isinstance(item, str):
            targets.append(TargetSpec(path=Path(item), rotation=replace(rotation)))
            continue
        if not isinstance(item, Mapping):
            continue
        overrides = {key: value for key, value in item.items() if key != "path"}
        path = item.get("path")
        targets.append(
            TargetSpec(
                path=Path(str(path)) if path else Path(),
                rotation=rotation.merged(overrides),
            )
        )
    return targets


def build_config(data: Mapping[str, Any]) -> CyclelogConfig:
    rotation_data = data.get("rotation", {})
    rotation = _to_rotation(rotation_data if isinstance(rotation_data, Mapping) else {})
    logging_data = data.get("logging", {})
    logging_settings = _to_logging(logging_data if isinstance(logging_data, Mapping) else {})
    targets = _to_targets(data.get("targets", []), rotation)

    raw_copy: Dict[str, Any] = deepcopy({k: v for k, v in data.items()})

    return CyclelogConfig(
        rotation=rotation,
        logging=logging_settings,
        targets=targets,
        raw=raw_copy,
    )
