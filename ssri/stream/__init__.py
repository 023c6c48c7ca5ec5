"""
ssri - Streaming Integrity

Pass-through stage that hashes bytes as they flow and, once the source is
exhausted, settles exactly one StreamResult:

- COMPUTED: no expectation configured, integrity computed
- VERIFIED: computed digest matched an expected entry
- SIZE_MISMATCH: byte count differs from the declared size
- CHECKSUM_MISMATCH: no expected entry matched
- UPSTREAM_ERROR: the byte source raised

The size check takes priority over the digest check. Only the running
hash state is kept, chunks are never buffered.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from ..core.config import DEFAULT_ALGORITHMS
from ..core.exceptions import ChecksumMismatchError, SizeMismatchError
from ..digest import Backend, build_integrity
from ..hashing import BytesLike, Hasher, new_hasher, to_bytes
from ..integrity import Integrity, IntegrityLike, find_match, parse
from ..metadata import IntegrityMetadata
from ..priority import AlgorithmPicker

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536


class OutcomeKind(Enum):
    """How a stream settled."""
    COMPUTED = "computed"
    VERIFIED = "verified"
    SIZE_MISMATCH = "size_mismatch"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    UPSTREAM_ERROR = "upstream_error"


@dataclass
class StreamResult:
    """Outcome of one streaming integrity operation."""
    kind: OutcomeKind
    size: int
    integrity: Optional[Integrity] = None
    match: Optional[IntegrityMetadata] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.COMPUTED, OutcomeKind.VERIFIED)

    def raise_for_outcome(self) -> None:
        """Raise the stored error, if any, unchanged."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> Dict[str, Any]:
        error = self.error
        return {
            "kind": self.kind.value,
            "size": self.size,
            "integrity": None if self.integrity is None else str(self.integrity),
            "match": None if self.match is None else str(self.match),
            "error": error.to_dict() if hasattr(error, "to_dict") else (None if error is None else str(error)),
        }


async def iter_chunks(source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """
    Adapt a byte source to an async iterator of bytes.

    Accepts objects with a sync or async read(n) (files,
    asyncio.StreamReader), async iterables, sync iterables of chunks, or
    a single bytes/str value. Text chunks are UTF-8 encoded.
    """
    if isinstance(source, (bytes, bytearray, memoryview, str)):
        yield to_bytes(source)
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                break
            yield to_bytes(chunk)
    elif hasattr(source, "__aiter__"):
        async for chunk in source:
            yield to_bytes(chunk)
    else:
        for chunk in source:
            yield to_bytes(chunk)


class IntegrityStream:
    """
    Verifying pass-through stage.

    Push-style: call update() per chunk (it returns the chunk unchanged)
    and finish() at end of data. Pull-style: give a source and iterate
    with ``async for``; chunks are yielded unchanged, and a size or
    checksum failure is raised when the source is exhausted.
    """

    def __init__(
        self,
        source: Any = None,
        *,
        integrity: Optional[IntegrityLike] = None,
        algorithms: Optional[Sequence[str]] = None,
        options: Optional[Sequence[str]] = None,
        size: Optional[int] = None,
        strict: bool = False,
        pick_algorithm: Optional[AlgorithmPicker] = None,
        backend: Backend = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize the stage.

        Args:
            source: Optional byte source for async iteration
            integrity: Expected integrity; enables verification
            algorithms: Algorithms to compute; defaults to the expected
                integrity's priority algorithm, or sha512
            options: Options tail for the computed entries
            size: Expected byte count
            strict: Parse with the strict grammar
            pick_algorithm: Custom algorithm comparator
            backend: Hash backend
            chunk_size: Read size for read()-style sources

        Raises:
            NoAlgorithmError: If the expected integrity has no valid entries,
                or the picker chose an algorithm it does not carry
            UnsupportedAlgorithmError: If a requested algorithm is unknown
        """
        self.source = source
        self.size = size
        self.options = tuple(options or ())
        self.strict = strict
        self.chunk_size = chunk_size

        self.sri: Optional[Integrity] = None
        self.algorithm: Optional[str] = None
        self.digests: Sequence[IntegrityMetadata] = ()
        if integrity is not None:
            self.sri = parse(integrity, strict=strict)
            self.algorithm = self.sri.resolve_algorithm(pick_algorithm)
            self.digests = self.sri[self.algorithm]

        self.algorithms: List[str] = list(
            algorithms or ([self.algorithm] if self.algorithm else DEFAULT_ALGORITHMS)
        )
        if self.algorithm and self.algorithm not in self.algorithms:
            self.algorithms.append(self.algorithm)
        self._hashers: List[Hasher] = [new_hasher(algo, backend) for algo in self.algorithms]

        self.bytes_seen = 0
        self._result: Optional[StreamResult] = None
        self._settled = asyncio.Event()
        self._chunks: Optional[AsyncIterator[bytes]] = None

    @property
    def result(self) -> Optional[StreamResult]:
        """The settled outcome, None while pending."""
        return self._result

    @property
    def done(self) -> bool:
        return self._result is not None

    def update(self, chunk: BytesLike) -> bytes:
        """Hash and count one chunk, returning it unchanged."""
        if self._result is not None:
            raise RuntimeError("Integrity stream already settled")
        data = to_bytes(chunk)
        self.bytes_seen += len(data)
        for hasher in self._hashers:
            hasher.update(data)
        return data

    def finish(self) -> StreamResult:
        """Settle at end of data. Repeated calls return the first outcome."""
        if self._result is not None:
            return self._result

        computed = build_integrity(
            [(algo, hasher.finish()) for algo, hasher in zip(self.algorithms, self._hashers)],
            options=self.options,
            strict=self.strict,
        )

        if self.size is not None and self.bytes_seen != self.size:
            error = SizeMismatchError(
                f"Stream size mismatch when checking {self.sri}.\n"
                f"  Wanted: {self.size}\n"
                f"  Found: {self.bytes_seen}",
                expected=self.size,
                found=self.bytes_seen,
                sri=self.sri,
            )
            logger.warning(
                f"Stream size mismatch: wanted {self.size}, found {self.bytes_seen}",
                extra={"size": self.bytes_seen, "sri": str(self.sri)},
            )
            return self._settle(StreamResult(OutcomeKind.SIZE_MISMATCH, self.bytes_seen, computed, error=error))

        if self.sri is None:
            return self._settle(StreamResult(OutcomeKind.COMPUTED, self.bytes_seen, computed))

        match = find_match(self.digests, computed.get(self.algorithm, ()))
        if match is None:
            error = ChecksumMismatchError(
                f"{self.sri} integrity checksum failed when using {self.algorithm}",
                algorithm=self.algorithm,
                expected=list(self.digests),
                found=computed,
                sri=self.sri,
            )
            logger.warning(
                f"Integrity checksum failed when using {self.algorithm}",
                extra={"algorithm": self.algorithm, "size": self.bytes_seen, "sri": str(self.sri)},
            )
            return self._settle(StreamResult(OutcomeKind.CHECKSUM_MISMATCH, self.bytes_seen, computed, error=error))

        return self._settle(StreamResult(OutcomeKind.VERIFIED, self.bytes_seen, computed, match=match))

    def fail(self, error: BaseException) -> StreamResult:
        """Settle with an upstream error. Ignored once settled."""
        if self._result is not None:
            return self._result
        return self._settle(StreamResult(OutcomeKind.UPSTREAM_ERROR, self.bytes_seen, error=error))

    def _settle(self, result: StreamResult) -> StreamResult:
        self._result = result
        self._settled.set()
        return result

    async def wait(self) -> StreamResult:
        """Wait until the stream settles."""
        await self._settled.wait()
        return self._result

    def _ensure_chunks(self) -> AsyncIterator[bytes]:
        if self.source is None:
            raise TypeError("IntegrityStream has no source to read from")
        if self._chunks is None:
            self._chunks = iter_chunks(self.source, self.chunk_size)
        return self._chunks

    def __aiter__(self) -> "IntegrityStream":
        self._ensure_chunks()
        return self

    async def __anext__(self) -> bytes:
        chunks = self._ensure_chunks()
        try:
            chunk = await chunks.__anext__()
        except StopAsyncIteration:
            self.finish().raise_for_outcome()
            raise
        except Exception as e:
            self.fail(e)
            raise
        return self.update(chunk)

    async def drain(self) -> StreamResult:
        """Consume the rest of the source, discarding output, and return the outcome."""
        chunks = self._ensure_chunks()
        try:
            async for chunk in chunks:
                self.update(chunk)
        except Exception as e:
            return self.fail(e)
        return self.finish()

    async def aclose(self) -> None:
        """Abandon the source. The outcome stays pending."""
        if self._chunks is not None:
            await self._chunks.aclose()
        close = getattr(self.source, "aclose", None)
        if close is not None:
            await close()


def integrity_stream(source: Any = None, **kwargs: Any) -> IntegrityStream:
    """Create a verifying pass-through stage (see IntegrityStream)."""
    return IntegrityStream(source, **kwargs)


async def from_stream(
    source: Any,
    *,
    algorithms: Optional[Sequence[str]] = None,
    options: Optional[Sequence[str]] = None,
    strict: bool = False,
    backend: Backend = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Integrity:
    """
    Compute integrity over a byte source.

    Raises:
        Exception: Whatever the source raised, unchanged
    """
    stream = IntegrityStream(
        source,
        algorithms=algorithms,
        options=options,
        strict=strict,
        backend=backend,
        chunk_size=chunk_size,
    )
    result = await stream.drain()
    result.raise_for_outcome()
    return result.integrity


async def check_stream(
    source: Any,
    sri: IntegrityLike,
    *,
    size: Optional[int] = None,
    algorithms: Optional[Sequence[str]] = None,
    strict: bool = False,
    pick_algorithm: Optional[AlgorithmPicker] = None,
    backend: Backend = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> IntegrityMetadata:
    """
    Verify a byte source against expected integrity.

    Returns:
        The expected entry that matched

    Raises:
        SizeMismatchError: If size is given and the byte count differs
        ChecksumMismatchError: If no expected digest matches
        NoAlgorithmError: If the expectation has no valid entries
        Exception: Whatever the source raised, unchanged
    """
    stream = IntegrityStream(
        source,
        integrity=sri,
        algorithms=algorithms,
        size=size,
        strict=strict,
        pick_algorithm=pick_algorithm,
        backend=backend,
        chunk_size=chunk_size,
    )
    result = await stream.drain()
    result.raise_for_outcome()
    return result.match
