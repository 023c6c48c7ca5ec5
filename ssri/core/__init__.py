"""
ssri Core Module

Configuration and the exception hierarchy shared by every subsystem.
"""

from .config import DEFAULT_ALGORITHMS, Config, HashBackend
from .exceptions import (
    SRIError,
    NoAlgorithmError,
    UnsupportedAlgorithmError,
    IntegrityError,
    ChecksumMismatchError,
    SizeMismatchError,
    ConfigurationError,
)

__all__ = [
    "DEFAULT_ALGORITHMS",
    "Config",
    "HashBackend",
    "SRIError",
    "NoAlgorithmError",
    "UnsupportedAlgorithmError",
    "IntegrityError",
    "ChecksumMismatchError",
    "SizeMismatchError",
    "ConfigurationError",
]
