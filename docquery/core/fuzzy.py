"""Approximate string matching by left-to-right subsequence alignment."""

from .normalize import fold_accents


def prepare(text: str) -> str:
    """Fold accents and case for fuzzy comparison."""
    return fold_accents(text).lower()


def fuzzy_score(text: str, query: str) -> float:
    """Score how well ``query`` aligns as a subsequence of ``text``.

    Walks ``text`` once with a cursor into ``query``. Each hit adds the
    running hit count divided by its 1-based position in ``text``, so
    early and dense hits score higher. The sum is divided by the query
    length. An empty query scores 1.0.

    Both arguments are compared as given; callers normalize first.
    """
    if not query:
        return 1.0

    query_length = len(query)
    matches = 0
    score = 0.0
    cursor = 0

    for position, char in enumerate(text, start=1):
        if cursor < query_length and char == query[cursor]:
            matches += 1
            score += matches / position
            cursor += 1

    return score / query_length


def fuzzy_match(text: str, query: str, threshold: float) -> bool:
    """Check whether ``query`` approximately occurs in ``text``.

    Contiguous substrings always match; otherwise the subsequence score
    must reach ``threshold``.
    """
    text = prepare(text)
    query = prepare(query)

    if query in text:
        return True

    return fuzzy_score(text, query) >= threshold
