"""
Headerless column inference.

For files without a header row, every column is profiled over up to 100
non-empty values (integer / float / date / strength / form / country /
category-keyword rates, average length, uniqueness, GTIN-13 rate) and the
profile is turned into a confidence per flat field through fixed
thresholds. Columns are then assigned greedily: all (column, field, score)
triples ≥ 0.6, highest first, each column and each field used once.

Public API:
    infer_headerless_guesses(rows) → list[ColumnGuess]
    infer_headerless_assignments(rows) → dict[str, str]
"""

import logging
import re
from dataclasses import dataclass, field

from config.countries import COUNTRY_LITERALS
from config.form_rules import FORM_SYNONYMS, HEADERLESS_FORM_WORDS, PURCHASE_UNITS
from config.umbrella_categories import UMBRELLA_CATEGORY_RULES
from processing.concat_decomposer import gtin13_is_valid
from processing.sanitizers import to_number
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Sampling and assignment
# ---------------------------------------------------------------------------
HEADERLESS_SAMPLE_ROWS: int = 100
MIN_ASSIGNMENT_SCORE: float = 0.6
GUESS_SAMPLE_VALUES: int = 3

# ---------------------------------------------------------------------------
# Value-shape patterns
# ---------------------------------------------------------------------------
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?\d+([.,]\d+)$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LOCALE_DATE_RE = re.compile(r"^\d{2}[/-]\d{2}[/-]\d{2,4}$")
_SERIAL_RE = re.compile(r"^\d{3,5}$")
_STRENGTH_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|ml|%)(?:\s*/\s*\d+(?:\.\d+)?\s*(mg|mcg|g|ml))?\b",
    re.IGNORECASE,
)
_ISO2_UPPER_RE = re.compile(r"^[A-Z]{2}$")
_COUNTRY_RE = re.compile(
    r"\b(" + "|".join(re.escape(c) for c in COUNTRY_LITERALS) + r")\b",
    re.IGNORECASE,
)
_RX_OTC_RE = re.compile(r"^(rx|otc)$", re.IGNORECASE)
_ALPHA_RE = re.compile(r"[A-Za-z]")

_CATEGORY_KEYWORDS: set[str] = {
    keyword.lower()
    for rule in UMBRELLA_CATEGORY_RULES
    for keyword in rule["category_keywords"]
}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ColumnGuess:
    """Ranked flat-field candidates for one headerless column."""

    key: str
    index: int
    candidates: list[tuple[str, float]] = field(default_factory=list)
    sample: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def infer_headerless_guesses(rows: list[dict]) -> list[ColumnGuess]:
    """
    Score every column against every flat field.

    Returns:
        One ColumnGuess per column, candidates with a score > 0 sorted by
        descending score, plus the first three sampled values.
    """
    keys = list(rows[0].keys()) if rows else []
    columns = _sample_columns(rows, keys)

    guesses: list[ColumnGuess] = []
    for position, key in enumerate(keys):
        scores = _score_column(columns[key])
        candidates = sorted(
            ((name, score) for name, score in scores.items() if score > 0),
            key=lambda pair: pair[1],
            reverse=True,
        )
        match = re.match(r"^col_(\d+)$", key)
        guesses.append(
            ColumnGuess(
                key=key,
                index=int(match.group(1)) - 1 if match else position,
                candidates=candidates,
                sample=columns[key][:GUESS_SAMPLE_VALUES],
            )
        )
    return guesses


def infer_headerless_assignments(rows: list[dict]) -> dict[str, str]:
    """
    Greedy one-to-one assignment of columns to flat fields.

    A GTIN column is never taken as a quantity column: its on_hand score
    is forced to zero.

    Returns:
        Column key → flat field name for every assigned column.
    """
    triples: list[tuple[str, str, float]] = []
    for guess in infer_headerless_guesses(rows):
        for name, score in guess.candidates:
            if score >= MIN_ASSIGNMENT_SCORE:
                triples.append((guess.key, name, score))
    triples.sort(key=lambda t: t[2], reverse=True)

    assignment: dict[str, str] = {}
    taken: set[str] = set()
    for column, name, _score in triples:
        if column in assignment or name in taken:
            continue
        assignment[column] = name
        taken.add(name)

    logger.debug(f"Headerless assignments: {assignment}")
    return assignment


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _sample_columns(rows: list[dict], keys: list[str]) -> dict[str, list[str]]:
    columns: dict[str, list[str]] = {k: [] for k in keys}
    for row in rows[:HEADERLESS_SAMPLE_ROWS]:
        for key in keys:
            text = cell_text(row.get(key))
            if text.strip():
                columns[key].append(text)
    return columns


def _score_column(values: list[str]) -> dict[str, float]:
    n = len(values) or 1

    def rate(predicate) -> float:
        return sum(1 for v in values if predicate(v)) / n

    # ---- 1. Value-shape rates
    p_gtin = rate(_is_gtin13)
    p_alpha = rate(lambda v: bool(_ALPHA_RE.search(v)))
    p_int = rate(lambda v: bool(_INT_RE.match(v.strip())))
    p_float = rate(lambda v: bool(_FLOAT_RE.match(v.strip())))
    p_num = rate(lambda v: bool(_INT_RE.match(v.strip()) or _FLOAT_RE.match(v.strip())))
    p_date = rate(_is_date)
    p_strength = rate(lambda v: bool(_STRENGTH_RE.search(v)))
    p_form = rate(_is_form)
    p_country = rate(_is_country)
    p_category = rate(_is_category_term)
    p_purchase_unit = rate(lambda v: v.lower().strip() in PURCHASE_UNITS)
    p_rx_otc = rate(lambda v: bool(_RX_OTC_RE.match(v.strip())))

    avg_len = sum(len(v) for v in values) / len(values) if values else 0.0
    uniq = len(set(values)) / len(values) if values else 0.0
    ints = [x for x in (to_number(v) for v in values) if isinstance(x, int)]
    min_int = min(ints) if ints else float("inf")
    max_int = max(ints) if ints else float("-inf")

    # ---- 2. Field confidences
    scores: dict[str, float] = {}
    scores["sku"] = 0.98 if p_gtin >= 0.9 else 0.7 if p_gtin >= 0.6 else 0.0
    if p_gtin >= 0.9:
        scores["on_hand"] = 0.0
    elif p_int >= 0.9 and avg_len <= 6:
        scores["on_hand"] = 0.9 + max(0.0, 0.1 - p_float)
    else:
        scores["on_hand"] = 0.6 if p_int >= 0.7 else 0.0
    scores["unit_price"] = (
        0.9 if p_num >= 0.9 and p_float >= 0.5 else 0.6 if p_float >= 0.3 else 0.0
    )
    scores["expiry_date"] = 0.95 if p_date >= 0.8 else 0.7 if p_date >= 0.5 else 0.0
    scores["batch_no"] = (
        0.8 if p_num < 0.4 and 4 <= avg_len <= 20 and uniq >= 0.5 else 0.0
    )
    scores["strength"] = 0.9 if p_strength >= 0.5 else 0.0
    scores["form"] = 0.9 if p_form >= 0.5 else 0.0
    scores["coo"] = 0.9 if p_country >= 0.5 else 0.0
    scores["category"] = 0.9 if p_category >= 0.6 else 0.6 if p_category >= 0.3 else 0.0
    if p_alpha >= 0.2 and avg_len >= 6 and uniq >= 0.7:
        scores["generic_name"] = 0.85
    else:
        scores["generic_name"] = 0.7 if p_alpha >= 0.2 and avg_len >= 10 else 0.0
    if p_int >= 0.9 and p_float < 0.1 and min_int >= 1 and max_int <= 500 and uniq <= 0.5:
        scores["pieces_per_unit"] = 0.9
    else:
        scores["pieces_per_unit"] = 0.7 if p_int >= 0.8 and max_int <= 200 else 0.0
    scores["purchase_unit"] = (
        0.95 if p_purchase_unit >= 0.95 else 0.7 if p_purchase_unit >= 0.7 else 0.0
    )
    scores["requires_prescription"] = (
        0.95 if p_rx_otc >= 0.95 else 0.7 if p_rx_otc >= 0.7 else 0.0
    )
    return scores


def _is_gtin13(value: str) -> bool:
    digits = re.sub(r"\D+", "", value.strip())
    return len(digits) == 13 and gtin13_is_valid(digits)


def _is_date(value: str) -> bool:
    text = value.strip()
    return bool(_ISO_DATE_RE.match(text) or _LOCALE_DATE_RE.match(text) or _SERIAL_RE.match(text))


def _is_form(value: str) -> bool:
    text = value.lower().strip()
    return text in FORM_SYNONYMS or text in HEADERLESS_FORM_WORDS


def _is_country(value: str) -> bool:
    text = value.strip()
    return bool(_ISO2_UPPER_RE.match(text) or _COUNTRY_RE.search(text))


def _is_category_term(value: str) -> bool:
    text = value.lower().strip()
    return bool(text) and any(keyword in text for keyword in _CATEGORY_KEYWORDS)
