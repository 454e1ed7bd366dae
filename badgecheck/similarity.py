"""String similarity measures used by the matcher."""

from rapidfuzz.distance import DamerauLevenshtein, Jaro

JARO = 'jaro'
DAMERAU = 'damerau'


def jaro(a: str, b: str) -> float:
    """Jaro similarity (0.0 – 1.0), used for first and last names.

    Args:
        a: First string (already normalized).
        b: Second string (already normalized).

    Returns:
        Similarity; 0.0 if either string is empty.
    """
    if not a or not b:
        return 0.0
    return Jaro.similarity(a, b)


def damerau_levenshtein(a: str, b: str) -> float:
    """Normalized Damerau-Levenshtein similarity, used for free-text interests.

    Adjacent transpositions count as one edit; the distance is divided by
    the length of the longer string.

    Args:
        a: First string (already normalized).
        b: Second string (already normalized).

    Returns:
        ``1 - distance / max(len(a), len(b))``; 0.0 if either string is empty.
    """
    if not a or not b:
        return 0.0
    return DamerauLevenshtein.normalized_similarity(a, b)


def similarity(a: str, b: str, algo: str = JARO) -> float:
    """Dispatch to :func:`jaro` or :func:`damerau_levenshtein`."""
    if algo == DAMERAU:
        return damerau_levenshtein(a, b)
    if algo == JARO:
        return jaro(a, b)
    raise ValueError(f"unknown similarity algorithm: {algo!r}")
