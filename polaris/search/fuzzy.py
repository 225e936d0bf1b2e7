"""Typo-tolerant string matching.

A cheap case-insensitive substring check runs first; only when it fails
do we pay for a normalized Levenshtein similarity.
"""

import math

from polaris.config import DEFAULT_FUZZY_THRESHOLD, clamp_unit


def clamp_threshold(threshold: float, default: float = DEFAULT_FUZZY_THRESHOLD) -> float:
    """Clamp a similarity threshold into [0, 1]. Non-numeric or non-finite input uses *default*."""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        return default
    if math.isnan(threshold) or math.isinf(threshold):
        return default
    return clamp_unit(float(threshold))


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between *a* and *b* using a single DP row.

    The row spans the shorter string, so memory is O(min(len(a), len(b))).
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        diagonal = row[0]
        row[0] = i
        for j, cb in enumerate(b, start=1):
            above = row[j]
            if ca == cb:
                row[j] = diagonal
            else:
                row[j] = min(diagonal, above, row[j - 1]) + 1
            diagonal = above
    return row[len(b)]


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; 1.0 for two empty strings. Symmetric."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def fuzzy_match(term: str, text: str, threshold: float = DEFAULT_FUZZY_THRESHOLD) -> bool:
    """True when *term* occurs in *text* or is at least *threshold* similar to it."""
    term_lower = term.lower()
    text_lower = text.lower()
    if term_lower in text_lower:
        return True
    return similarity(term_lower, text_lower) >= clamp_threshold(threshold)
