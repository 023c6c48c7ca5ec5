"""
ssri - Digest Generation

Builds Integrity values from hex digests or in-memory data, and checks
in-memory data against expected integrity.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

from ..core.config import DEFAULT_ALGORITHMS, HashBackend
from ..core.exceptions import ChecksumMismatchError, NoAlgorithmError
from ..grammar import option_string
from ..hashing import BytesLike, Hasher, b64_from_hex, b64encode, new_hasher, to_bytes
from ..integrity import Integrity, IntegrityLike, parse
from ..metadata import IntegrityMetadata
from ..priority import AlgorithmPicker

logger = logging.getLogger(__name__)

Backend = Optional[Union[HashBackend, str]]


def build_integrity(
    digests: Sequence[Tuple[str, bytes]],
    options: Optional[Sequence[str]] = None,
    strict: bool = False,
) -> Integrity:
    """
    Fold (algorithm, raw digest) pairs into an Integrity.

    Each entry is rendered with the shared options tail and re-parsed, so
    strict mode drops entries the strict grammar rejects.
    """
    tail = option_string(options)
    entries = []
    for algorithm, raw in digests:
        meta = IntegrityMetadata.parse(f"{algorithm}-{b64encode(raw)}{tail}", strict=strict)
        if meta is not None:
            entries.append(meta)
    return Integrity(entries)


def from_hex(
    hex_digest: str,
    algorithm: str,
    *,
    options: Optional[Sequence[str]] = None,
    strict: bool = False,
) -> Integrity:
    """Build an Integrity from a hex-encoded digest."""
    return parse(
        f"{algorithm}-{b64_from_hex(hex_digest)}{option_string(options)}",
        strict=strict,
    )


def from_data(
    data: BytesLike,
    *,
    algorithms: Optional[Sequence[str]] = None,
    options: Optional[Sequence[str]] = None,
    strict: bool = False,
    backend: Backend = None,
) -> Integrity:
    """
    Compute integrity for an in-memory buffer.

    Args:
        data: Bytes, or text hashed as UTF-8
        algorithms: Algorithms to compute, in output order (default sha512)
        options: Options tail appended to every entry
        strict: Drop entries that the strict grammar rejects
        backend: Hash backend

    Returns:
        Integrity with one entry per algorithm
    """
    return create(
        algorithms=algorithms,
        options=options,
        strict=strict,
        backend=backend,
    ).update(data).digest()


def check_data(
    data: BytesLike,
    sri: IntegrityLike,
    *,
    strict: bool = False,
    pick_algorithm: Optional[AlgorithmPicker] = None,
    error: bool = False,
    backend: Backend = None,
) -> Optional[IntegrityMetadata]:
    """
    Verify an in-memory buffer against expected integrity.

    Any entry under the resolved algorithm may match.

    Args:
        data: Bytes, or text hashed as UTF-8
        sri: Expected integrity in any accepted form
        strict: Parse the expectation with the strict grammar
        pick_algorithm: Custom algorithm comparator
        error: Raise instead of returning None on failure
        backend: Hash backend

    Returns:
        The matching expected entry, or None

    Raises:
        ChecksumMismatchError: On mismatch when error is set
        NoAlgorithmError: For an empty expectation when error is set
    """
    expected = parse(sri, strict=strict)
    if expected.is_empty():
        if error:
            raise NoAlgorithmError(f"No valid integrity entries in {sri!r}")
        return None

    algorithm = expected.pick_algorithm(pick_algorithm)
    candidates = expected.get(algorithm, ())
    found = None
    if candidates:
        hasher = new_hasher(algorithm, backend)
        hasher.update(to_bytes(data))
        digest = b64encode(hasher.finish())
        found = f"{algorithm}-{digest}"
        for meta in candidates:
            if meta.digest == digest:
                return meta
        logger.debug(f"No {algorithm} digest in {expected} matched {digest}")
    else:
        logger.debug(f"Picked algorithm {algorithm} is not present in {expected}")

    if error:
        raise ChecksumMismatchError(
            f"{expected} integrity checksum failed when using {algorithm}",
            algorithm=algorithm,
            expected=list(candidates),
            found=found,
            sri=expected,
        )
    return None


class IntegrityHasher:
    """
    Incremental integrity builder.

    Usage:
        integrity = create(algorithms=["sha256"]).update(b"chunk").update(b"more").digest()
    """

    def __init__(
        self,
        algorithms: Optional[Sequence[str]] = None,
        options: Optional[Sequence[str]] = None,
        strict: bool = False,
        backend: Backend = None,
    ):
        self.algorithms: List[str] = list(algorithms or DEFAULT_ALGORITHMS)
        self.options = tuple(options or ())
        self.strict = strict
        self._hashers: List[Hasher] = [new_hasher(algo, backend) for algo in self.algorithms]

    def update(self, chunk: BytesLike) -> "IntegrityHasher":
        data = to_bytes(chunk)
        for hasher in self._hashers:
            hasher.update(data)
        return self

    def digest(self) -> Integrity:
        return build_integrity(
            [(algo, hasher.finish()) for algo, hasher in zip(self.algorithms, self._hashers)],
            options=self.options,
            strict=self.strict,
        )


def create(
    *,
    algorithms: Optional[Sequence[str]] = None,
    options: Optional[Sequence[str]] = None,
    strict: bool = False,
    backend: Backend = None,
) -> IntegrityHasher:
    """Start an incremental integrity computation."""
    return IntegrityHasher(algorithms, options=options, strict=strict, backend=backend)
