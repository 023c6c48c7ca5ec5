"""
ssri - Hash Primitives

Incremental hashers keyed by algorithm name, and the base64/hex codec
used to render digests.

Backends:
- hashlib: any algorithm the interpreter's OpenSSL build exposes
- cryptography: cryptography.hazmat.primitives.hashes
"""

import base64
import hashlib
import logging
import string
from typing import Callable, Dict, Optional, Protocol, Union

from cryptography.hazmat.primitives import hashes

from ..core.config import HashBackend
from ..core.exceptions import UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview, str]

_B64_CHARS = frozenset(string.ascii_letters + string.digits + "+/")
_URLSAFE = str.maketrans("-_", "+/")


class Hasher(Protocol):
    """Incremental digest accumulator."""

    def update(self, data: bytes) -> None:
        ...

    def finish(self) -> bytes:
        ...


class HashlibHasher:
    """Hasher backed by hashlib.new()."""

    def __init__(self, algorithm: str):
        try:
            self._hash = hashlib.new(algorithm.lower())
        except (ValueError, TypeError) as e:
            raise UnsupportedAlgorithmError(algorithm, HashBackend.HASHLIB.value) from e
        self.algorithm = algorithm

    def update(self, data: bytes) -> None:
        self._hash.update(data)

    def finish(self) -> bytes:
        return self._hash.digest()


class CryptographyHasher:
    """Hasher backed by cryptography's hash contexts."""

    ALGORITHMS: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
        "md5": hashes.MD5,
        "sha1": hashes.SHA1,
        "sha224": hashes.SHA224,
        "sha256": hashes.SHA256,
        "sha384": hashes.SHA384,
        "sha512": hashes.SHA512,
        "sha512_224": hashes.SHA512_224,
        "sha512_256": hashes.SHA512_256,
        "sha3_224": hashes.SHA3_224,
        "sha3_256": hashes.SHA3_256,
        "sha3_384": hashes.SHA3_384,
        "sha3_512": hashes.SHA3_512,
        "blake2b": lambda: hashes.BLAKE2b(64),
        "blake2s": lambda: hashes.BLAKE2s(32),
    }

    def __init__(self, algorithm: str):
        factory = self.ALGORITHMS.get(algorithm.lower())
        if factory is None:
            raise UnsupportedAlgorithmError(algorithm, HashBackend.CRYPTOGRAPHY.value)
        self._hash = hashes.Hash(factory())
        self.algorithm = algorithm

    def update(self, data: bytes) -> None:
        self._hash.update(bytes(data))

    def finish(self) -> bytes:
        return self._hash.finalize()


_BACKENDS = {
    HashBackend.HASHLIB: HashlibHasher,
    HashBackend.CRYPTOGRAPHY: CryptographyHasher,
}


def new_hasher(
    algorithm: str,
    backend: Optional[Union[HashBackend, str]] = None,
) -> Hasher:
    """
    Create an incremental hasher.

    Args:
        algorithm: Hash algorithm name (md5, sha1, sha256, ...)
        backend: HashBackend or its value; defaults to hashlib

    Returns:
        Hasher with update() and finish()

    Raises:
        UnsupportedAlgorithmError: If the backend does not know the algorithm
    """
    backend = HashBackend(backend) if backend else HashBackend.HASHLIB
    logger.debug(f"Creating {backend.value} hasher for {algorithm}")
    return _BACKENDS[backend](algorithm)


def to_bytes(data: BytesLike) -> bytes:
    """Text is hashed as its UTF-8 encoding."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def b64decode(text: str) -> bytes:
    """Decode base64 leniently: url-safe characters, missing padding and stray characters are accepted."""
    cleaned = "".join(c for c in text.translate(_URLSAFE) if c in _B64_CHARS)
    if len(cleaned) % 4 == 1:
        # a lone trailing sextet cannot encode a byte
        cleaned = cleaned[:-1]
    return base64.b64decode(cleaned + "=" * (-len(cleaned) % 4))


def hex_from_b64(digest: str) -> str:
    return b64decode(digest).hex()


def b64_from_hex(hex_digest: str) -> str:
    return b64encode(bytes.fromhex(hex_digest))
