"""
ssri - Integrity Metadata Grammar

Tokenizes integrity strings and matches single entries of the form
``algorithm-digest?opt1?opt2`` in one of two conformance levels:

- loose: anything up to the first ``-`` is the algorithm, the digest runs
  up to an optional ``?`` options tail, options are unrestricted
- strict: algorithm must be one of SPEC_ALGORITHMS, digest must be
  base64 and each option must be visible ASCII (0x21-0x7E)

See https://w3c.github.io/webappsec-subresource-integrity/#integrity-metadata-description
"""

import re
from typing import List, NamedTuple, Optional, Sequence, Tuple

SPEC_ALGORITHMS = ("sha256", "sha384", "sha512")

BASE64_REGEX = re.compile(r"[a-z0-9+/]+(?:=?=?)", re.IGNORECASE)
SRI_REGEX = re.compile(r"([^-]+)-([^?]+)((?:\?\S*)?)")
STRICT_SRI_REGEX = re.compile(r"([^-]+)-([A-Za-z0-9+/]+(?:=?=?))((?:\?[\x21-\x7E]*)?)")
VCHAR_REGEX = re.compile(r"[\x21-\x7E]+")
WHITESPACE_REGEX = re.compile(r"\s+")
NON_WHITESPACE_REGEX = re.compile(r"\S+")


class EntryParts(NamedTuple):
    """Raw pieces of one matched entry."""
    algorithm: str
    digest: str
    options: Tuple[str, ...]


def tokenize(integrity: str) -> List[str]:
    """Split an integrity string on runs of whitespace."""
    return [token for token in WHITESPACE_REGEX.split(integrity.strip()) if token]


def split_options(raw: str) -> Tuple[str, ...]:
    """Split a ``?``-prefixed options tail into its tokens."""
    if not raw:
        return ()
    return tuple(raw[1:].split("?"))


def match_entry(source: str, strict: bool = False) -> Optional[EntryParts]:
    """
    Match one trimmed entry against the selected grammar.

    Args:
        source: Entry text, already trimmed
        strict: Use the W3C-conformant grammar

    Returns:
        EntryParts, or None if the entry does not conform
    """
    match = (STRICT_SRI_REGEX if strict else SRI_REGEX).fullmatch(source)
    if not match:
        return None

    algorithm, digest, raw_options = match.groups()
    if strict and algorithm not in SPEC_ALGORITHMS:
        return None

    return EntryParts(algorithm, digest, split_options(raw_options))


def is_spec_algorithm(algorithm: Optional[str]) -> bool:
    return algorithm in SPEC_ALGORITHMS


def is_base64(digest: Optional[str]) -> bool:
    return bool(digest) and BASE64_REGEX.fullmatch(digest) is not None


def is_vchar(option: str) -> bool:
    return VCHAR_REGEX.fullmatch(option) is not None


def conforms_strictly(algorithm: Optional[str], digest: Optional[str], options: Sequence[str]) -> bool:
    """Check an entry's fields against the strict productions."""
    return (
        is_spec_algorithm(algorithm)
        and is_base64(digest)
        and all(is_vchar(opt) for opt in options)
    )


def option_string(options: Optional[Sequence[str]]) -> str:
    """Render an options tail, empty when there are no options."""
    if not options:
        return ""
    return "?" + "?".join(options)


def strict_separator(sep: str) -> str:
    """Replace every non-whitespace run in a separator with a single space."""
    return NON_WHITESPACE_REGEX.sub(" ", sep)
