"""
Umbrella therapeutic category classification.

A row resolves to one of the 23 umbrella categories in one of two ways:
  - its 3-letter category code (identity.cat) maps directly, or
  - free text is scored against each rule's keyword sets:
        category keyword in category text      +3
        generic keyword in generic or brand    +2
        category keyword in description        +1
        device keyword anywhere                +2 (+4 for MISC)
        negative keywords                      −2 × penalty
    The best rule wins only with a score ≥ 3 and a lead of ≥ 2 over the
    runner-up, so ambiguous text stays unclassified.

Public API:
    map_category_code_to_umbrella(code) → str | None
    classify_umbrella_category(generic, brand, category, description) → str | None
    umbrella_label(umbrella_id) → str | None
    suggest_medicine_category(text) → str | None
"""

import logging
import re

from config.umbrella_categories import (
    CATEGORY_CODE_TO_UMBRELLA,
    CATEGORY_HIT_WEIGHT,
    DESCRIPTION_HIT_WEIGHT,
    DEVICE_HIT_WEIGHT,
    GENERIC_HIT_WEIGHT,
    MEDICINE_CATEGORY_LABELS,
    MIN_CLASSIFIER_SCORE,
    MIN_CLASSIFIER_SEPARATION,
    MISC_DEVICE_HIT_WEIGHT,
    NEGATIVE_CATEGORY_PENALTY,
    NEGATIVE_GENERIC_PENALTY,
    UMBRELLA_BY_ID,
    UMBRELLA_CATEGORY_RULES,
)
from utils.fuzzy_match import best_match
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Lowercase label → label, for "did you mean" suggestions.
_LABEL_CANDIDATES: dict[str, str] = {
    label.lower(): label for label in MEDICINE_CATEGORY_LABELS
}


def map_category_code_to_umbrella(code: str | None) -> str | None:
    """Umbrella id for a 3-letter therapeutic code ("ant" → ANTI_INFECTIVES)."""
    key = cell_text(code).strip().upper()
    if not key:
        return None
    return CATEGORY_CODE_TO_UMBRELLA.get(key)


def classify_umbrella_category(
    generic_name: str | None = None,
    brand_name: str | None = None,
    category: str | None = None,
    description: str | None = None,
) -> str | None:
    """
    Score free text against every umbrella rule and return the clear winner.

    Args:
        generic_name: Generic / international name.
        brand_name: Brand name; shares the generic-keyword signal.
        category: Free-text category label from the file.
        description: Notes or leftover text.

    Returns:
        Umbrella id, or None when no rule reaches the minimum score or the
        top two are too close to call.
    """
    g = _normalize(generic_name)
    b = _normalize(brand_name)
    c = _normalize(category)
    d = _normalize(description)
    combined = " ".join(part for part in (g, b, c, d) if part)

    best_id: str | None = None
    best_score = 0
    second_score = 0

    for rule in UMBRELLA_CATEGORY_RULES:
        score = 0
        if c and _includes_any(c, rule["category_keywords"]):
            score += CATEGORY_HIT_WEIGHT
        if _includes_any(g, rule["generic_keywords"]) or _includes_any(b, rule["generic_keywords"]):
            score += GENERIC_HIT_WEIGHT
        if d and _includes_any(d, rule["category_keywords"]):
            score += DESCRIPTION_HIT_WEIGHT
        if rule.get("device_keywords") and _includes_any(combined, rule["device_keywords"]):
            score += MISC_DEVICE_HIT_WEIGHT if rule["id"] == "MISC" else DEVICE_HIT_WEIGHT

        negative = 0
        if rule.get("negative_category_keywords") and _includes_any(
            combined, rule["negative_category_keywords"]
        ):
            negative += NEGATIVE_CATEGORY_PENALTY
        if rule.get("negative_generic_keywords") and _includes_any(
            combined, rule["negative_generic_keywords"]
        ):
            negative += NEGATIVE_GENERIC_PENALTY
        score -= negative * 2

        if score > best_score:
            second_score = best_score
            best_score = score
            best_id = rule["id"]
        elif score > second_score:
            second_score = score

    if best_id is None or best_score < MIN_CLASSIFIER_SCORE:
        return None
    if best_score - second_score < MIN_CLASSIFIER_SEPARATION:
        logger.debug(
            f"Umbrella classification ambiguous for '{combined}' "
            f"(best {best_id}={best_score}, runner-up={second_score})"
        )
        return None
    return best_id


def umbrella_label(umbrella_id: str | None) -> str | None:
    """Human-readable label of an umbrella id."""
    if not umbrella_id:
        return None
    rule = UMBRELLA_BY_ID.get(umbrella_id)
    return rule["label"] if rule else None


def suggest_medicine_category(text: str | None) -> str | None:
    """Closest umbrella label to a rejected category, for error messages."""
    if not text:
        return None
    label, _score = best_match(str(text), _LABEL_CANDIDATES, threshold=70)
    return label


def _normalize(value: object) -> str:
    text = _NON_ALNUM_RE.sub(" ", cell_text(value).lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def _includes_any(haystack: str, needles: list[str]) -> bool:
    return any(needle in haystack for needle in needles)
