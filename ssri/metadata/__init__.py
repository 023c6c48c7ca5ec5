"""
ssri - Integrity Metadata

A single digest assertion parsed from (or rendered to) one
``algorithm-digest?options`` entry.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from ..grammar import conforms_strictly, match_entry, option_string
from ..hashing import hex_from_b64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityMetadata:
    """One algorithm/digest pair plus its options."""
    algorithm: str
    digest: str
    options: Tuple[str, ...] = ()
    source: str = field(default="", compare=False)

    @classmethod
    def parse(cls, metadata: str, strict: bool = False) -> Optional["IntegrityMetadata"]:
        """
        Parse one entry.

        Args:
            metadata: Entry text; surrounding whitespace is trimmed
            strict: Use the W3C-conformant grammar

        Returns:
            IntegrityMetadata, or None if the entry is malformed
        """
        source = metadata.strip()
        parts = match_entry(source, strict=strict)
        if parts is None or not parts.algorithm or not parts.digest:
            logger.debug(f"Dropping malformed integrity entry: {source!r}")
            return None
        return cls(
            algorithm=parts.algorithm,
            digest=parts.digest,
            options=parts.options,
            source=source,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "IntegrityMetadata":
        """Build from a metadata-shaped mapping (algorithm, digest, options)."""
        options = record.get("options") or ()
        if isinstance(options, str):
            options = (options,)
        return cls(
            algorithm=record.get("algorithm") or "",
            digest=record.get("digest") or "",
            options=tuple(options),
        )

    def is_valid(self) -> bool:
        return bool(self.algorithm) and bool(self.digest)

    def hex_digest(self) -> str:
        """Digest decoded from base64 and re-encoded as hex."""
        return hex_from_b64(self.digest) if self.digest else ""

    def to_string(self, strict: bool = False) -> str:
        """
        Render as ``algorithm-digest?opts``.

        In strict mode an entry that does not conform to the W3C
        productions renders as the empty string.
        """
        if strict and not conforms_strictly(self.algorithm, self.digest, self.options):
            return ""
        return f"{self.algorithm}-{self.digest}{option_string(self.options)}"

    def to_json(self) -> str:
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()


def render_entry(entry: Any, strict: bool = False) -> str:
    """Render an IntegrityMetadata or a metadata-shaped mapping."""
    if isinstance(entry, IntegrityMetadata):
        return entry.to_string(strict=strict)
    return IntegrityMetadata.from_record(entry).to_string(strict=strict)


def is_metadata_like(obj: Any) -> bool:
    """True for IntegrityMetadata or a mapping with algorithm and digest."""
    if isinstance(obj, IntegrityMetadata):
        return obj.is_valid()
    return (
        isinstance(obj, Mapping)
        and bool(obj.get("algorithm"))
        and bool(obj.get("digest"))
        and isinstance(obj.get("algorithm"), str)
    )

