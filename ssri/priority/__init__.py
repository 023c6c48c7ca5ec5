"""
ssri - Algorithm Priority

Picks the algorithm whose digests are trusted when an aggregate carries
several. The default policy is a best-effort ranking of common hash
algorithms; later entries in DEFAULT_PRIORITY win and unknown names rank
below all of them.
"""

from functools import reduce
from typing import Callable, Iterable, Optional

from ..core.exceptions import NoAlgorithmError

# Weakest first
DEFAULT_PRIORITY = (
    "md5",
    "whirlpool",
    "sha1",
    "sha224",
    "sha256",
    "sha384",
    "sha512",
)

AlgorithmPicker = Callable[[str, str], Optional[str]]


def priority_index(algorithm: str) -> int:
    """Rank of an algorithm in DEFAULT_PRIORITY, -1 when unknown."""
    try:
        return DEFAULT_PRIORITY.index(algorithm.lower())
    except ValueError:
        return -1


def get_prioritized_hash(algo1: str, algo2: str) -> str:
    """Return the stronger of two algorithms; ties keep the first."""
    if priority_index(algo1) >= priority_index(algo2):
        return algo1
    return algo2


def pick_algorithm(
    algorithms: Iterable[str],
    picker: Optional[AlgorithmPicker] = None,
) -> str:
    """
    Fold a picker left to right over algorithm names.

    A picker returning a falsy value keeps the accumulator.

    Args:
        algorithms: Algorithm names in encounter order
        picker: Two-argument comparator, defaults to get_prioritized_hash

    Returns:
        The winning algorithm name

    Raises:
        NoAlgorithmError: If there are no algorithms to choose from
    """
    pick = picker or get_prioritized_hash
    names = list(algorithms)
    if not names:
        raise NoAlgorithmError()
    return reduce(lambda acc, algo: pick(acc, algo) or acc, names)
