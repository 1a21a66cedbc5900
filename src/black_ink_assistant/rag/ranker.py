"""
Hybrid Ranker

Re-ranks vector-store candidates by combining the store's semantic
similarity with a lexical keyword score:

    combined = semantic * 0.7 + keyword_count * 0.3

``keyword_count`` is the number of query tokens (lower-cased, longer than
three characters) that appear as substrings of the candidate text. It is an
unnormalised integer, so long queries weigh the keyword side more heavily
than the bounded semantic side.
"""

from __future__ import annotations

from typing import List, Sequence

from ..embeddings.models import RetrievalResult, VectorMatch

SEMANTIC_WEIGHT = 0.7
KEYWORD_WEIGHT = 0.3
MIN_KEYWORD_LENGTH = 4


def extract_keywords(query: str) -> List[str]:
    """Lower-cased whitespace tokens longer than three characters."""
    return [t for t in query.lower().split() if len(t) >= MIN_KEYWORD_LENGTH]


def keyword_score(keywords: Sequence[str], text: str) -> int:
    """Count of keywords contained in ``text`` (case-insensitive substring)."""
    haystack = text.lower()
    return sum(1 for keyword in keywords if keyword in haystack)


def combined_score(semantic: float, keywords: int) -> float:
    return semantic * SEMANTIC_WEIGHT + keywords * KEYWORD_WEIGHT


def rank(
    query: str,
    candidates: Sequence[VectorMatch],
    top_k: int,
) -> List[RetrievalResult]:
    """
    Rank candidates by combined score and keep the best ``top_k``.

    Parameters
    ----------
    query : str
        Raw query text.

    candidates : Sequence[VectorMatch]
        Candidate pool in the store's order. Ties keep this order.

    top_k : int
        Maximum number of results.

    Returns
    -------
    List[RetrievalResult]
        Results sorted by descending combined score.
    """
    if not query or not query.strip() or top_k <= 0:
        return []

    keywords = extract_keywords(query)

    scored = [
        RetrievalResult(
            id=match.id,
            content=match.text,
            score=combined_score(match.score or 0.0, keyword_score(keywords, match.text)),
            source=str(match.metadata.get("source") or ""),
            category=str(match.metadata.get("category") or ""),
        )
        for match in candidates
    ]

    # sorted() is stable, equal scores keep candidate order
    scored = sorted(scored, key=lambda r: r.score, reverse=True)
    return scored[:top_k]
