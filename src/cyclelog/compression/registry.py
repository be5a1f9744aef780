"""Registry of compression codecs by name."""

from __future__ import annotations

from typing import Dict

from ..core.errors import ConfigurationError
from .codecs import BZIP2, GZIP, XZ, Codec

__all__ = ["DEFAULT_CODEC", "CODECS", "get_codec", "register_codec"]

DEFAULT_CODEC = GZIP.name

CODECS: Dict[str, Codec] = {
    GZIP.name: GZIP,
    "gz": GZIP,
    BZIP2.name: BZIP2,
    "bzip2": BZIP2,
    XZ.name: XZ,
    "lzma": XZ,
}


def get_codec(name: str) -> Codec:
    codec = CODECS.get(name.lower())
    if codec is None:
        raise ConfigurationError(f"Unknown compression codec: {name}")
    return codec


def register_codec(codec: Codec, *aliases: str) -> None:
    """Make ``codec`` available under its name and ``aliases``."""

    for key in (codec.name, *aliases):
        CODECS[key.lower()] = codec
