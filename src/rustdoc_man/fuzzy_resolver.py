"""Fuzzy name suggestions for items that could not be found.

Suggestions are ranked with:
- Composite scoring using multiple RapidFuzz algorithms (token_set, token_sort, partial)
- Path component bonus system for exact and partial matches
- Adaptive thresholds based on query length
- Unicode normalization for consistent matching
- Configurable weights via FUZZY_WEIGHTS in config.py
"""

import logging
import unicodedata

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from .config import FUZZY_WEIGHTS
from .models.doc import SEPARATOR

logger = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    """
    Normalize Unicode characters in query for consistent matching.

    Args:
        query: The input query string

    Returns:
        Normalized query string
    """
    normalized = unicodedata.normalize("NFC", query)
    # default_process lowercases and turns "::" into whitespace for the token scorers
    return default_process(normalized) if normalized else ""


def composite_path_score(query: str, candidate: str) -> float:
    """
    Calculate a composite similarity score using multiple RapidFuzz algorithms.

    Args:
        query: The user's search query
        candidate: The candidate path to compare against

    Returns:
        Normalized similarity score between 0.0 and 1.0
    """
    query_norm = normalize_query(query)
    candidate_norm = normalize_query(candidate)
    if not query_norm or not candidate_norm:
        return 0.0

    token_set = fuzz.token_set_ratio(query_norm, candidate_norm) / 100.0
    token_sort = fuzz.token_sort_ratio(query_norm, candidate_norm) / 100.0
    partial = fuzz.partial_ratio(query_norm, candidate_norm) / 100.0

    score = (
        FUZZY_WEIGHTS["token_set_ratio"] * token_set
        + FUZZY_WEIGHTS["token_sort_ratio"] * token_sort
        + FUZZY_WEIGHTS["partial_ratio"] * partial
    )
    return max(0.0, min(1.0, score))


def calculate_path_bonus(query: str, candidate: str) -> float:
    """
    Calculate bonus score for matches of the last path component.

    Args:
        query: The user's search query
        candidate: The candidate path to compare against

    Returns:
        Bonus score between 0.0 and the configured path component bonus
    """
    query_parts = [p for p in query.split(SEPARATOR) if p]
    candidate_parts = [p for p in candidate.split(SEPARATOR) if p]
    if not query_parts or not candidate_parts:
        return 0.0

    query_final = query_parts[-1].lower()
    candidate_final = candidate_parts[-1].lower()

    if query_final == candidate_final:
        return FUZZY_WEIGHTS["path_component_bonus"]
    elif query_final in candidate_final:
        return FUZZY_WEIGHTS["partial_component_bonus"]
    elif candidate_final in query_final:
        # Slightly lower for reverse match
        return FUZZY_WEIGHTS["partial_component_bonus"] * 0.6

    return 0.0


def get_adaptive_threshold(query: str) -> float:
    """
    Calculate an adaptive similarity threshold based on query length.

    Shorter queries are more forgiving (lower threshold) while longer queries
    should be more specific (higher threshold).
    """
    query_length = len(query.strip())

    if query_length <= 5:
        return 0.55
    elif query_length <= 10:
        return 0.60
    elif query_length <= 20:
        return 0.63
    else:
        return 0.65


def get_fuzzy_suggestions(
    query: str,
    candidates: list[str],
    limit: int = 3,
    threshold: float = 0.6,
) -> list[str]:
    """
    Get the candidates most similar to a name that was not found.

    Args:
        query: The name that wasn't found
        candidates: Known names to choose from
        limit: Maximum number of suggestions to return (default: 3)
        threshold: Minimum similarity score threshold (default: 0.6, but adaptive)

    Returns:
        Up to ``limit`` candidates, best match first
    """
    if not candidates or limit <= 0:
        return []

    effective_threshold = min(threshold, get_adaptive_threshold(query))

    scored_candidates = []
    for candidate in candidates:
        if candidate == query:
            continue
        base_score = composite_path_score(query, candidate)
        if base_score == 0:
            continue
        final_score = min(1.0, base_score + calculate_path_bonus(query, candidate))
        if final_score >= effective_threshold:
            scored_candidates.append((candidate, final_score))

    # Best score first, ties in name order
    scored_candidates.sort(key=lambda x: (-x[1], x[0]))
    suggestions = [candidate for candidate, _ in scored_candidates[:limit]]

    logger.info(
        f"Found {len(suggestions)} fuzzy suggestions for '{query}' "
        f"(threshold: {effective_threshold:.2f}, candidates evaluated: {len(candidates)})"
    )
    return suggestions
