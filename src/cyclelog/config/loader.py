"""Configuration loading pipeline.

Sources are layered lowest first:

1. built-in defaults
2. ``cyclelog.toml`` / ``cyclelog.yaml`` in the user configuration directory
3. the same files in the working directory
4. ``[tool.cyclelog]`` in the working directory's ``pyproject.toml``
5. an explicit file (``config_file`` argument or ``CYCLELOG_CONFIG``)
6. ``CYCLELOG__SECTION__KEY`` environment variables
7. programmatic overrides
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, cast

import yaml
from platformdirs import user_config_dir

from ..core.errors import ConfigurationError
from .schema import CyclelogConfig, build_config, default_config

try:  # pragma: no cover
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]


_APP_NAME = "cyclelog"
_ENV_PREFIX = "CYCLELOG__"
_ENV_FILE = "CYCLELOG_CONFIG"
_FILENAMES = ("cyclelog.toml", "cyclelog.yaml", "cyclelog.yml")


def _as_mapping(data: Any, path: Path) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{path}: top level must be a table, got {type(data).__name__}")
    return {str(key): value for key, value in data.items()}


def _read_file(path: Path) -> Dict[str, Any]:
    """Parse one configuration file; the suffix selects TOML or YAML."""

    try:
        if path.suffix == ".toml":
            with path.open("rb") as fh:
                return _as_mapping(tomllib.load(fh), path)
        with path.open("r", encoding="utf-8") as fh:
            return _as_mapping(yaml.safe_load(fh), path)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: invalid TOML ({exc})") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path}: invalid YAML ({exc})") from exc


def _merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        existing = base.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge(existing, value)
        elif isinstance(value, Mapping):
            base[key] = _merge(dict(existing) if isinstance(existing, Mapping) else {}, value)
        else:
            base[key] = value
    return base


def _load_directory(directory: Path) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if not directory.is_dir():
        return data
    for filename in _FILENAMES:
        path = directory / filename
        if path.is_file():
            _merge(data, _read_file(path))
    return data


def _load_user_config() -> Dict[str, Any]:
    return _load_directory(Path(user_config_dir(_APP_NAME)))


def _load_local_config() -> Dict[str, Any]:
    return _load_directory(Path.cwd())


def _load_pyproject() -> Dict[str, Any]:
    path = Path.cwd() / "pyproject.toml"
    if not path.is_file():
        return {}
    tool = _read_file(path).get("tool", {})
    section = tool.get(_APP_NAME, {}) if isinstance(tool, Mapping) else {}
    return _as_mapping(section, path)


def _load_explicit(config_file: str | Path | None) -> Dict[str, Any]:
    if config_file is None:
        config_file = os.environ.get(_ENV_FILE) or None
    if config_file is None:
        return {}
    path = Path(config_file).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")
    return _read_file(path)


def _coerce_value(value: str) -> Any:
    stripped = value.strip()
    lowered = stripped.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"none", "null"}:
        return None
    try:
        return int(stripped)
    except ValueError:
        pass
    if stripped.startswith("[") or stripped.startswith("{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
    return stripped


def _env_config() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for env_key, raw_value in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        path = [segment.lower() for segment in env_key[len(_ENV_PREFIX) :].split("__")]
        target: Dict[str, Any] = data
        for segment in path[:-1]:
            target = cast(Dict[str, Any], target.setdefault(segment, {}))
        target[path[-1]] = _coerce_value(raw_value)
    return data


def load_configuration(
    overrides: Mapping[str, Any] | None = None,
    *,
    config_file: str | Path | None = None,
) -> CyclelogConfig:
    """Load configuration from every source in precedence order."""

    merged = default_config()
    for layer in (
        _load_user_config(),
        _load_local_config(),
        _load_pyproject(),
        _load_explicit(config_file),
        _env_config(),
        overrides or {},
    ):
        if layer:
            _merge(merged, layer)
    return build_config(merged)
