"""
ssri - Subresource Integrity

Parse, generate and verify integrity metadata strings of the form
``algorithm-base64digest?options``, for in-memory data and for byte
streams.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .core.config import DEFAULT_ALGORITHMS, Config, HashBackend
from .core.exceptions import (
    SRIError,
    NoAlgorithmError,
    UnsupportedAlgorithmError,
    IntegrityError,
    ChecksumMismatchError,
    SizeMismatchError,
    ConfigurationError,
)
from .digest import IntegrityHasher, check_data, create, from_data, from_hex
from .integrity import Integrity, parse, stringify
from .metadata import IntegrityMetadata
from .priority import DEFAULT_PRIORITY, get_prioritized_hash
from .stream import (
    IntegrityStream,
    OutcomeKind,
    StreamResult,
    check_stream,
    from_stream,
    integrity_stream,
)

__all__ = [
    "DEFAULT_ALGORITHMS",
    "DEFAULT_PRIORITY",
    "Config",
    "HashBackend",
    "Integrity",
    "IntegrityMetadata",
    "IntegrityHasher",
    "IntegrityStream",
    "OutcomeKind",
    "StreamResult",
    "parse",
    "stringify",
    "from_hex",
    "from_data",
    "from_stream",
    "check_data",
    "check_stream",
    "integrity_stream",
    "create",
    "get_prioritized_hash",
    "SRIError",
    "NoAlgorithmError",
    "UnsupportedAlgorithmError",
    "IntegrityError",
    "ChecksumMismatchError",
    "SizeMismatchError",
    "ConfigurationError",
]
