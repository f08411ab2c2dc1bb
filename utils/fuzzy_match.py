"""
Fuzzy string matching utilities.

Wraps thefuzz for vocabulary "best match" lookups and rapidfuzz for the raw
similarity measures used by header mapping and form autocorrect.
"""

import logging
import re

from rapidfuzz.distance import JaroWinkler, Levenshtein
from thefuzz import fuzz

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def best_match(
    value: str,
    candidates: dict[str, str],
    threshold: int = 80,
) -> tuple[str | None, int]:
    """
    Closest candidate key to *value* by token_sort_ratio, mapped to its value.

    Word order does not matter ("Anti infectives" vs "Infectives anti").
    Keys are expected lowercase; *value* is lowercased here.

    Returns:
        (canonical_value, score) when the best score reaches *threshold*,
        otherwise (None, 0).
    """
    if not value or not candidates:
        return None, 0

    needle = value.strip().lower()
    scored = [
        (fuzz.token_sort_ratio(needle, key), canonical)
        for key, canonical in candidates.items()
    ]
    # max() keeps the first of equal scores, so candidate order breaks ties
    score, canonical = max(scored, key=lambda pair: pair[0])

    if score < threshold:
        logger.debug(f"No fuzzy match for '{value}' (best '{canonical}' at {score})")
        return None, 0
    logger.debug(f"Fuzzy matched '{value}' → '{canonical}' (score={score})")
    return canonical, score


def token_set_dice(a: str, b: str) -> float:
    """Dice coefficient over the unique lowercase alphanumeric tokens of a and b."""
    tokens_a = set(_NON_ALNUM_RE.sub(" ", str(a).lower()).split())
    tokens_b = set(_NON_ALNUM_RE.sub(" ", str(b).lower()).split())
    denom = len(tokens_a) + len(tokens_b)
    if not denom:
        return 0.0
    return 2 * len(tokens_a & tokens_b) / denom


def jaro_winkler(a: str, b: str) -> float:
    """Case-insensitive Jaro-Winkler similarity in [0, 1] (prefix weight 0.1)."""
    return JaroWinkler.similarity(str(a).lower(), str(b).lower(), prefix_weight=0.1)


def levenshtein(a: str, b: str) -> int:
    """Plain edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(a, b)
