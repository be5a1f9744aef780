"""Byte size parsing."""

from __future__ import annotations

import re

__all__ = ["parse_size"]

_UNITS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
}

_SIZE_RE = re.compile(r"^\s*(?P<value>-?\d+(?:\.\d+)?)\s*(?P<unit>[a-zA-Z]*)\s*$")


def parse_size(value: int | float | str) -> int:
    """Return ``value`` in bytes.

    Integers are taken as bytes; strings may carry a ``K``, ``M`` or ``G``
    suffix (binary multiples), e.g. ``"10M"``.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    match = _SIZE_RE.match(value)
    if match is None:
        raise ValueError(f"Invalid size: {value!r}")
    unit = match.group("unit").lower()
    if unit not in _UNITS:
        raise ValueError(f"Invalid size unit in {value!r}")
    return int(float(match.group("value")) * _UNITS[unit])
