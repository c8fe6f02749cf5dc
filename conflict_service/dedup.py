"""
Deduplication Utils
===================

Remove duplicate matches and rank what is left.
"""

import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .detector import ContradictionMatch

logger = logging.getLogger(__name__)


def match_key(match: "ContradictionMatch") -> Tuple[str, str]:
    """Two matches are duplicates iff their statement pair is identical"""
    return (match.text1, match.text2)


def deduplicate_matches(matches: List["ContradictionMatch"]) -> List["ContradictionMatch"]:
    """
    Remove matches whose (text1, text2) was already seen.

    Comparison is exact and case-sensitive; the first occurrence wins.
    """
    if not matches:
        return []

    seen = set()
    unique = []

    for match in matches:
        key = match_key(match)
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)

    logger.info(f"Dedup matches: {len(unique)} unique (removed {len(matches) - len(unique)})")
    return unique


def rank_matches(
    matches: List["ContradictionMatch"],
    limit: Optional[int] = None
) -> List["ContradictionMatch"]:
    """
    Sort by confidence, highest first, and keep the top `limit`.

    The sort is stable: equal confidences keep their input order.
    """
    ranked = sorted(matches, key=lambda match: match.confidence, reverse=True)
    if limit is not None:
        ranked = ranked[:max(limit, 0)]
    return ranked
