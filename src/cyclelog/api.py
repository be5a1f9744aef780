"""Public API surface for cyclelog."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from .config.loader import load_configuration
from .config.schema import CyclelogConfig
from .core.manager import GLOBAL_MANAGER
from .core.rotation import Rotation
from .core.validation import validate_configuration, validate_rotation

_CONFIG: CyclelogConfig | None = None


def configure(
    overrides: Dict[str, Any] | None = None,
    *,
    config_file: str | Path | None = None,
) -> CyclelogConfig:
    """Load, validate and apply configuration; return it."""

    global _CONFIG
    config = load_configuration(overrides or {}, config_file=config_file)
    validate_configuration(config)
    GLOBAL_MANAGER.configure(config.logging)
    _CONFIG = config
    return config


def _ensure_configured() -> CyclelogConfig:
    if _CONFIG is None:
        return configure({})
    return _CONFIG


def get_rotation(path: str | Path | None = None, **overrides: Any) -> Rotation:
    """Return an engine configured for ``path``.

    Settings of a matching configured target take precedence over the
    global ``[rotation]`` section; keyword ``overrides`` use the same keys
    as that section and win over both.
    """

    config = _ensure_configured()
    settings = config.settings_for(path) if path is not None else config.rotation
    if overrides:
        settings = settings.merged(overrides)
        validate_rotation(settings)
    return Rotation.from_settings(settings)


def rotate(path: str | Path, **overrides: Any) -> bool:
    """Rotate ``path`` once with the configured settings."""

    return get_rotation(path, **overrides).rotate(path)


def rotate_all() -> Dict[str, bool]:
    """Rotate every configured target; return the result per path."""

    config = _ensure_configured()
    results: Dict[str, bool] = {}
    for target in config.targets:
        results[str(target.path)] = Rotation.from_settings(target.rotation).rotate(target.path)
    return results
