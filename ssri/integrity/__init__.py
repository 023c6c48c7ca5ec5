"""
ssri - Integrity Aggregate

Groups integrity metadata by algorithm and converts between the text
form and the object form.

Provides:
- Integrity: read-only ordered mapping of algorithm -> entries
- parse(): text, metadata or aggregate input -> fresh Integrity
- stringify(): any accepted input -> normalized text

Key order is the order algorithms were first seen; entries under a key
keep their encounter order. Aggregates are never mutated, every update
returns a new instance.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..core.exceptions import ChecksumMismatchError, NoAlgorithmError
from ..grammar import strict_separator, tokenize
from ..metadata import IntegrityMetadata, is_metadata_like, render_entry
from ..priority import AlgorithmPicker, pick_algorithm

logger = logging.getLogger(__name__)

IntegrityLike = Union[str, IntegrityMetadata, "Integrity", Mapping[str, Any]]


class Integrity(Mapping[str, Tuple[IntegrityMetadata, ...]]):
    """
    Multi-algorithm collection of digests for one resource.

    Entries that lack an algorithm or a digest are dropped on
    construction.
    """

    def __init__(self, entries: Iterable[IntegrityMetadata] = ()):
        grouped: Dict[str, List[IntegrityMetadata]] = {}
        for meta in entries:
            if not meta.is_valid():
                logger.debug(f"Dropping incomplete integrity entry: {meta!r}")
                continue
            grouped.setdefault(meta.algorithm, []).append(meta)
        self._hashes: Dict[str, Tuple[IntegrityMetadata, ...]] = {
            algorithm: tuple(metas) for algorithm, metas in grouped.items()
        }

    def __getitem__(self, algorithm: str) -> Tuple[IntegrityMetadata, ...]:
        return self._hashes[algorithm]

    def __iter__(self) -> Iterator[str]:
        return iter(self._hashes)

    def __len__(self) -> int:
        return len(self._hashes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Integrity):
            return list(self.items()) == list(other.items())
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        return f"Integrity({self.to_string()!r})"

    def __str__(self) -> str:
        return self.to_string()

    def entries(self) -> Iterator[IntegrityMetadata]:
        """All entries, algorithm by algorithm."""
        for metas in self._hashes.values():
            yield from metas

    def is_empty(self) -> bool:
        return not self._hashes

    def with_entry(self, meta: IntegrityMetadata) -> "Integrity":
        """Return a new aggregate with one more entry appended."""
        return Integrity([*self.entries(), meta])

    def to_string(self, *, strict: bool = False, sep: str = " ") -> str:
        """
        Serialize all entries.

        Args:
            strict: Omit entries that do not conform to the W3C grammar
            sep: Entry separator; in strict mode its non-whitespace
                characters are replaced with spaces

        Returns:
            Integrity string (empty if nothing renders)
        """
        return _render_groups(self._hashes.values(), strict=strict, sep=sep)

    def to_json(self) -> str:
        return self.to_string()

    def concat(self, other: IntegrityLike, *, strict: bool = False) -> "Integrity":
        """
        Combine with another integrity value.

        Algorithms keep the position of their first sighting; entries for
        an algorithm already present are appended to its list.
        """
        other_text = other if isinstance(other, str) else stringify(other, strict=strict)
        return parse(f"{self.to_string(strict=strict)} {other_text}", strict=strict)

    def merge(self, other: IntegrityLike, *, strict: bool = False) -> "Integrity":
        """
        Add the algorithms of another integrity value that are not yet present.

        Raises:
            ChecksumMismatchError: If an algorithm present on both sides has
                no digest in common
        """
        incoming = parse(other, strict=strict)
        entries = list(self.entries())
        for algorithm, metas in incoming.items():
            if algorithm not in self:
                entries.extend(metas)
                continue
            if not find_match(self[algorithm], metas):
                raise ChecksumMismatchError(
                    f"Hashes do not match, cannot merge {incoming} into {self}",
                    algorithm=algorithm,
                    expected=list(self[algorithm]),
                    found=incoming,
                    sri=self,
                )
        return Integrity(entries)

    def match(
        self,
        other: IntegrityLike,
        *,
        strict: bool = False,
        pick_algorithm: Optional[AlgorithmPicker] = None,
    ) -> Optional[IntegrityMetadata]:
        """
        Find the entry of this aggregate that agrees with another value.

        The algorithm is chosen by priority over the other value's
        algorithms.

        Returns:
            The matching entry from this aggregate, or None
        """
        candidate = parse(other, strict=strict)
        if candidate.is_empty():
            return None
        algorithm = candidate.pick_algorithm(pick_algorithm)
        if algorithm not in self:
            return None
        return find_match(self[algorithm], candidate[algorithm])

    def pick_algorithm(self, picker: Optional[AlgorithmPicker] = None) -> str:
        """
        Resolve the algorithm to trust.

        Raises:
            NoAlgorithmError: If the aggregate is empty
        """
        return pick_algorithm(self._hashes.keys(), picker)

    def resolve_algorithm(self, picker: Optional[AlgorithmPicker] = None) -> str:
        """
        Resolve the algorithm to trust and require it to be present.

        Raises:
            NoAlgorithmError: If the aggregate is empty or the picker chose
                an algorithm it does not carry
        """
        algorithm = self.pick_algorithm(picker)
        if algorithm not in self:
            raise NoAlgorithmError(f"Picked algorithm {algorithm} is not present in {self}")
        return algorithm

    def hex_digest(self, picker: Optional[AlgorithmPicker] = None) -> str:
        """Hex digest of the first entry under the priority algorithm."""
        return self[self.resolve_algorithm(picker)][0].hex_digest()


def find_match(
    expected: Iterable[IntegrityMetadata],
    found: Iterable[IntegrityMetadata],
) -> Optional[IntegrityMetadata]:
    """First expected entry whose digest equals any found digest."""
    found_digests = {meta.digest for meta in found}
    for meta in expected:
        if meta.digest in found_digests:
            return meta
    return None


def _render_groups(groups: Iterable[Iterable[Any]], strict: bool, sep: str) -> str:
    sep = sep or " "
    if strict:
        # entries must be separated by whitespace
        sep = strict_separator(sep)
    rendered = []
    for group in groups:
        text = sep.join(
            entry_text
            for entry_text in (render_entry(entry, strict=strict) for entry in group)
            if entry_text
        )
        if text:
            rendered.append(text)
    return sep.join(rendered)


def _parse(integrity: str, strict: bool, single: bool) -> Union[Integrity, Optional[IntegrityMetadata]]:
    # https://w3c.github.io/webappsec-subresource-integrity/#parse-metadata
    if single:
        return IntegrityMetadata.parse(integrity, strict=strict)
    parsed = (IntegrityMetadata.parse(token, strict=strict) for token in tokenize(integrity))
    return Integrity(meta for meta in parsed if meta is not None)


def parse(sri: IntegrityLike, *, strict: bool = False, single: bool = False) -> Any:
    """
    Parse integrity input into a freshly built value.

    Args:
        sri: Integrity string, IntegrityMetadata, Integrity, or a plain
            metadata-shaped / aggregate-shaped mapping
        strict: Use the W3C-conformant grammar
        single: Parse the whole input as one entry

    Returns:
        Integrity, or IntegrityMetadata (None if malformed) when single
    """
    if isinstance(sri, str):
        return _parse(sri, strict, single)
    return _parse(stringify(sri, strict=strict), strict, single)


def stringify(obj: IntegrityLike, *, strict: bool = False, sep: str = " ") -> str:
    """
    Serialize any accepted integrity input.

    Strings are parsed and re-serialized, which normalizes whitespace and
    drops malformed entries.
    """
    if isinstance(obj, str):
        return parse(obj, strict=strict).to_string(strict=strict, sep=sep)
    if is_metadata_like(obj):
        return render_entry(obj, strict=strict)
    if isinstance(obj, Integrity):
        return obj.to_string(strict=strict, sep=sep)
    if isinstance(obj, Mapping):
        return _render_groups(obj.values(), strict=strict, sep=sep)
    raise TypeError(f"Cannot serialize {type(obj).__name__} as integrity metadata")
