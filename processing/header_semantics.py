"""
Header semantics: map raw column labels to canonical keys with confidence.

Two lookups live here:
  - score_header / suggest_header_mappings: confidence scoring of a header
    against the semantic definitions (exact synonym, negative tokens,
    weighted token overlap, value-type compatibility of a small sample).
  - normalize_header_key / fuzzy_header_map: direct synonym-table lookup
    for generic CSV mapping, exact first and fuzzy second.

Public API:
    score_header(header, sample_values) → HeaderMappingHint
    suggest_header_mappings(rows, headers=None) → list[HeaderMappingHint]
    normalize_header_key(header) → str | None
    fuzzy_header_map(header) → (field | None, score)
"""

import logging
import re
from dataclasses import dataclass

from config.header_synonyms import (
    HEADER_MAPPING_THRESHOLD,
    HEADER_SAMPLE_ROWS,
    HEADER_SEMANTIC_DEFS,
    HEADER_SYNONYMS,
    OTHER_TOKEN_WEIGHT,
    SECONDARY_HEADER_TOKENS,
    SECONDARY_TOKEN_WEIGHT,
    STRONG_HEADER_TOKENS,
    STRONG_TOKEN_WEIGHT,
    TYPE_COMPATIBLE_RATIO,
    TYPE_MISMATCH_PENALTY,
)
from processing.header_detector import looks_date_like, looks_numeric
from utils.fuzzy_match import jaro_winkler, token_set_dice
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

_BRACKETS_RE = re.compile(r"[\[\](){}]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class HeaderMappingHint:
    """Best canonical key for one header. key is None below the mapping threshold."""

    header: str
    key: str | None
    confidence: float


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def normalize_header_text(header: str) -> str:
    """Lowercase, brackets and punctuation to spaces, whitespace collapsed."""
    text = _BRACKETS_RE.sub(" ", str(header).lower())
    text = _NON_ALNUM_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def score_against_definition(header: str, definition: dict, sample_values: list) -> float:
    """
    Confidence in [0, 1] that *header* names the field described by *definition*.

    Exact synonym → 1.0; a negative token inside the header → 0.0; otherwise
    the weighted overlap of synonym tokens with header tokens, minus a
    penalty when the sampled values do not fit the field's value type.
    """
    norm = normalize_header_text(header)
    if norm in definition["synonyms"]:
        return 1.0
    if any(neg in norm for neg in definition.get("negative", [])):
        return 0.0

    header_tokens = set(norm.split())
    score = 0.0
    # Tokens shared by several synonyms count once per synonym
    for synonym in definition["synonyms"]:
        for token in normalize_header_text(synonym).split():
            if token in header_tokens:
                if token in STRONG_HEADER_TOKENS:
                    score += STRONG_TOKEN_WEIGHT
                elif token in SECONDARY_HEADER_TOKENS:
                    score += SECONDARY_TOKEN_WEIGHT
                else:
                    score += OTHER_TOKEN_WEIGHT

    if not _type_compatible(sample_values, definition["type"]):
        score -= TYPE_MISMATCH_PENALTY
    return max(0.0, min(1.0, score))


def score_header(header: str, sample_values: list) -> HeaderMappingHint:
    """Score *header* against every semantic definition and keep the best."""
    best_key: str | None = None
    best_score = 0.0
    for definition in HEADER_SEMANTIC_DEFS:
        score = score_against_definition(header, definition, sample_values)
        if score > best_score:
            best_key = definition["key"]
            best_score = score

    if best_score >= HEADER_MAPPING_THRESHOLD:
        return HeaderMappingHint(header=header, key=best_key, confidence=best_score)
    return HeaderMappingHint(header=header, key=None, confidence=best_score)


def suggest_header_mappings(
    rows: list[dict],
    headers: list[str] | None = None,
) -> list[HeaderMappingHint]:
    """
    Suggest a canonical key for every header, using up to 20 rows as the sample.

    Args:
        rows: Raw rows keyed by header.
        headers: Headers to score. Defaults to the keys of the first row.

    Returns:
        One HeaderMappingHint per header, in header order.
    """
    if headers is None:
        headers = list(rows[0].keys()) if rows else []
    sample = rows[:HEADER_SAMPLE_ROWS]
    hints = [score_header(h, [r.get(h) for r in sample]) for h in headers]
    logger.debug(
        "Header hints: "
        + ", ".join(f"{h.header}→{h.key}({h.confidence:.2f})" for h in hints)
    )
    return hints


def normalize_header_key(header: str) -> str | None:
    """Exact synonym-table lookup after snake-casing the header."""
    key = str(header).strip().lower()
    key = re.sub(r"\s+", "_", key)
    key = re.sub(r"[^\w]", "", key)
    key = re.sub(r"_+", "_", key).strip("_")
    for field_name, synonyms in HEADER_SYNONYMS.items():
        if key in synonyms:
            return field_name
    return None


def fuzzy_header_map(header: str) -> tuple[str | None, float]:
    """
    Best synonym-table field for *header* by fuzzy similarity.

    Similarity is the larger of the token-set dice coefficient and the
    Jaro-Winkler score. The caller applies the acceptance threshold.
    """
    cleaned = _WHITESPACE_RE.sub(" ", _NON_ALNUM_RE.sub(" ", str(header).lower())).strip()
    best_field: str | None = None
    best_score = 0.0
    for field_name, synonyms in HEADER_SYNONYMS.items():
        for synonym in synonyms:
            score = max(token_set_dice(cleaned, synonym), jaro_winkler(cleaned, synonym))
            if score > best_score:
                best_field, best_score = field_name, score
    return best_field, best_score


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _type_compatible(values: list, value_type: str) -> bool:
    if value_type == "number":
        return _share_matching(values, looks_numeric) >= TYPE_COMPATIBLE_RATIO
    if value_type == "date":
        return _share_matching(values, looks_date_like) >= TYPE_COMPATIBLE_RATIO
    return True


def _share_matching(values: list, predicate) -> float:
    """Share of non-empty values satisfying *predicate*; 0 when all are empty."""
    present = [cell_text(v).strip() for v in values if v is not None and v != ""]
    if not present:
        return 0.0
    return sum(1 for v in present if predicate(v)) / len(present)
