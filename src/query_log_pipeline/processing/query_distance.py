"""
Pairwise query distance combining edit distance and n-gram overlap.

Implements the lexical, semantic and conditional query distances used by
the session clustering stage (Lucchese et al. 2011, pg284-285):

    lexical(a, b)     = (normalized_levenshtein(a, b) + jaccard(a, b, 3)) / 2
    distance(a, b)    = w * lexical(a, b) + (1 - w) * semantic(a, b)
    conditional(a, b) = lexical(a, b)                     if lexical < threshold
                        min(lexical, multiplier * semantic) otherwise

All functions are pure, allocate only local buffers and never raise on
degenerate input (empty strings, strings shorter than the n-gram size).
Outputs are non-negative; 0 means identical under that metric.

The semantic term is looked up through a replaceable slot, see
set_semantic_distance().
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

import Levenshtein

from ..config.constants import (
    DEFAULT_LEXICAL_OVERRIDE_THRESHOLD,
    DEFAULT_LEXICAL_WEIGHT,
    DEFAULT_NGRAM_SIZE,
    DEFAULT_SEMANTIC_MULTIPLIER,
)

if TYPE_CHECKING:
    from ..config.settings import Settings

logger = logging.getLogger(__name__)

DistanceFn = Callable[[str, str], float]


# =============================================================================
# Lexical components
# =============================================================================


def levenshtein(a: str, b: str, normalize: bool = True) -> float:
    """
    Edit distance between two strings.

    Computed with the Levenshtein package (row dynamic programming,
    O(len(a) * len(b)) time, linear memory).

    Against an empty string the raw distance is the other string's length
    and the normalized distance is 1.0. Earlier distance tables stored the
    raw length even when normalizing, so normalized values involving an
    empty query differ from those tables.

    Args:
        a: First string
        b: Second string
        normalize: Divide by the length of the longer string

    Returns:
        Raw edit count, or a value in [0, 1] when normalized
    """
    if a == b:
        return 0.0

    max_len = max(len(a), len(b))

    if not a or not b:
        dist = max_len
    else:
        dist = Levenshtein.distance(a, b)

    if normalize:
        return dist / max_len
    return float(dist)


def normalized_levenshtein(a: str, b: str) -> float:
    """Levenshtein distance divided by the longer string's length."""
    return levenshtein(a, b, normalize=True)


def ngrams(text: str, n: int = DEFAULT_NGRAM_SIZE) -> list[str]:
    """
    Ordered n-gram list used by jaccard().

    Produces ``len(text) - n + 1`` grams of length ``n - 1``. The gram
    length is one short of n, matching the distances already computed
    for existing clusterings.
    """
    count = len(text) - n + 1
    return [text[i : i + n - 1] for i in range(max(count, 0))]


def jaccard(a: str, b: str, n: int = DEFAULT_NGRAM_SIZE) -> float:
    """
    n-gram overlap distance.

    Not a true Jaccard index: the overlap is the number of equal gram
    pairs across the two gram lists, divided by the sum of the raw gram
    counts rather than by a deduplicated union. Grams come from ngrams().

    Edge cases:
        - either string shorter than n: 1.0 (maximum distance), whether or
          not the strings are equal
        - equal strings: 0.0
        - repetitive strings can produce more pairs than grams; the result
          is floored at 0.0

    Args:
        a: First string
        b: Second string
        n: n-gram size (default: 3)

    Returns:
        Distance in [0, 1]
    """
    if min(len(a), len(b)) < n:
        return 1.0
    if a == b:
        return 0.0

    grams_a = ngrams(a, n)
    grams_b = ngrams(b, n)

    counts_b = Counter(grams_b)
    intersection = sum(counts_b[gram] for gram in grams_a)

    return max(0.0, 1.0 - intersection / (len(grams_a) + len(grams_b)))


def lexical_distance(a: str, b: str, n: int = DEFAULT_NGRAM_SIZE) -> float:
    """Mean of normalized Levenshtein and n-gram Jaccard distance."""
    return (normalized_levenshtein(a, b) + jaccard(a, b, n)) / 2


# =============================================================================
# Semantic component (pluggable)
# =============================================================================


def _semantic_distance_stub(a: str, b: str) -> float:
    """Placeholder until a semantic model is plugged in."""
    return 0.0


_semantic_distance_fn: DistanceFn = _semantic_distance_stub


def semantic_distance(a: str, b: str) -> float:
    """Meaning-level distance, delegated to the installed implementation."""
    return _semantic_distance_fn(a, b)


def set_semantic_distance(fn: DistanceFn) -> DistanceFn:
    """
    Install a semantic distance implementation.

    Meant to be called once at startup, before any distances are computed.

    Args:
        fn: Callable taking two strings and returning a non-negative float

    Returns:
        The previously installed implementation
    """
    global _semantic_distance_fn

    previous = _semantic_distance_fn
    _semantic_distance_fn = fn
    logger.info(f"Semantic distance set to {getattr(fn, '__name__', fn)!r}")
    return previous


def reset_semantic_distance() -> None:
    """Restore the constant-zero placeholder."""
    global _semantic_distance_fn

    _semantic_distance_fn = _semantic_distance_stub


# =============================================================================
# Composite distances
# =============================================================================


def distance(
    a: str,
    b: str,
    lexical_weight: float = DEFAULT_LEXICAL_WEIGHT,
    n: int = DEFAULT_NGRAM_SIZE,
) -> float:
    """
    Weighted combination of lexical and semantic distance.

    Args:
        a: First query
        b: Second query
        lexical_weight: 1.0 = lexical only, 0.0 = semantic only
        n: n-gram size for the lexical component

    Returns:
        Composite distance
    """
    return lexical_weight * lexical_distance(a, b, n) + (
        1 - lexical_weight
    ) * semantic_distance(a, b)


def conditional_distance(
    a: str,
    b: str,
    override_threshold: float = DEFAULT_LEXICAL_OVERRIDE_THRESHOLD,
    semantic_multiplier: float = DEFAULT_SEMANTIC_MULTIPLIER,
    n: int = DEFAULT_NGRAM_SIZE,
) -> float:
    """
    Lexical distance, overridden by semantic distance for dissimilar strings.

    Lexically close queries are taken as reformulations of each other and
    the semantic term is not evaluated at all.

    Args:
        a: First query
        b: Second query
        override_threshold: Lexical distance below which it is returned as-is
        semantic_multiplier: Scale applied to the semantic distance
        n: n-gram size for the lexical component

    Returns:
        Conditional distance
    """
    lexical = lexical_distance(a, b, n)
    if lexical < override_threshold:
        return lexical
    return min(lexical, semantic_multiplier * semantic_distance(a, b))


@dataclass(frozen=True)
class QueryDistance:
    """
    Query distance with configured weights and thresholds.

    Usage:
        qd = QueryDistance.from_settings(get_settings())
        qd.conditional_distance("new york pizza", "nyc pizza")
    """

    lexical_weight: float = DEFAULT_LEXICAL_WEIGHT
    override_threshold: float = DEFAULT_LEXICAL_OVERRIDE_THRESHOLD
    semantic_multiplier: float = DEFAULT_SEMANTIC_MULTIPLIER
    ngram_size: int = DEFAULT_NGRAM_SIZE

    @classmethod
    def from_settings(cls, settings: "Settings") -> "QueryDistance":
        d = settings.distance
        return cls(
            lexical_weight=d.lexical_weight,
            override_threshold=d.lexical_override_threshold,
            semantic_multiplier=d.semantic_multiplier,
            ngram_size=d.ngram_size,
        )

    def lexical_distance(self, a: str, b: str) -> float:
        return lexical_distance(a, b, self.ngram_size)

    def distance(self, a: str, b: str) -> float:
        return distance(a, b, self.lexical_weight, self.ngram_size)

    def conditional_distance(self, a: str, b: str) -> float:
        return conditional_distance(
            a,
            b,
            self.override_threshold,
            self.semantic_multiplier,
            self.ngram_size,
        )
