"""cyclelog public API."""

from .api import configure, get_rotation, rotate, rotate_all
from .core.errors import ConfigurationError, FailureCode, RotationAssertionError, RotationFailed
from .core.generations import GenerationProcessor
from .core.rotation import Rotation, RotationOutcome, RotationRequest
from .version import __version__

__all__ = [
    "configure",
    "get_rotation",
    "rotate",
    "rotate_all",
    "Rotation",
    "RotationRequest",
    "RotationOutcome",
    "RotationFailed",
    "RotationAssertionError",
    "ConfigurationError",
    "FailureCode",
    "GenerationProcessor",
    "__version__",
]
