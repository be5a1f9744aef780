"""Log level resolution for the ``[logging]`` section."""

from __future__ import annotations

import logging

from .errors import ConfigurationError

__all__ = ["resolve_level"]


def resolve_level(value: int | str) -> int:
    """Return the numeric level for ``value`` (``"debug"``, ``"WARN"``, ``"20"``, ``10``)."""

    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid log level: {value!r}")
    if isinstance(value, int):
        return value
    name = str(value).strip()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name.upper())
    if isinstance(resolved, int):
        return resolved
    raise ConfigurationError(f"Unknown log level '{value}'")
