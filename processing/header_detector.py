"""
Header-mode detection for raw tabular matrices.

Decides whether the first row of a file is a header row or already data,
then turns the matrix into key → value rows accordingly.

Scoring works on row 1 only:
  - header signals: cells containing a header-lexicon token (weight 1) and
    short alphabetic labels of ≤3 words, average length ≤12 (weight 0.5)
  - data signals: date-shaped, numeric, dose-unit and country-name cells

When neither side clearly wins, row 1 is compared to row 2 cell by cell; a
first row that mostly shares the second row's value types is data.

Public API:
    detect_header_mode(matrix) → "headers" | "none"
    build_raw_rows(matrix, mode) → list[dict]
"""

import logging
import math
import re

from config.countries import COUNTRY_LITERALS
from config.header_synonyms import HEADER_LEXICON_TOKENS
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------
MIN_SIGNAL_SCORE: float = 2.0
SHORT_LABEL_WEIGHT: float = 0.5
SHORT_LABEL_MAX_TOKENS: int = 3
SHORT_LABEL_MAX_AVG_LEN: float = 12.0
SAME_TYPE_RATIO: float = 0.6

# ---------------------------------------------------------------------------
# Cell-shape patterns
# ---------------------------------------------------------------------------
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LOCALE_DATE_RE = re.compile(r"^\d{2}[/-]\d{2}[/-]\d{2,4}$")
_SERIAL_DATE_RE = re.compile(r"^\d{3,5}$")
_NUMERIC_RE = re.compile(r"^[-+]?\d+(?:[.,]\d+)?$")
_DOSE_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|iu|ml|%)\b", re.IGNORECASE)
_DOSE_RATIO_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|ml)\s*/\s*\d+(?:\.\d+)?\s*(mg|mcg|g|ml)\b",
    re.IGNORECASE,
)
_UNIT_WORD_RE = re.compile(r"\b(mg|mcg|ml|%|g|iu)\b", re.IGNORECASE)
_FORM_WORD_RE = re.compile(
    r"^(tablet|tab|capsule|cap|syrup|cream|ointment|inj|injection|solution)$",
    re.IGNORECASE,
)
_COUNTRY_RE = re.compile(
    r"\b(" + "|".join(re.escape(c) for c in COUNTRY_LITERALS) + r")\b",
    re.IGNORECASE,
)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def detect_header_mode(matrix: list[list[object]]) -> str:
    """
    Decide whether row 1 of *matrix* is a header row.

    Args:
        matrix: Array-of-arrays view of the file (blank rows removed).

    Returns:
        "headers" when row 1 reads as column labels, otherwise "none".
    """
    first = [cell_text(v) for v in (matrix[0] if matrix else [])]
    second = [cell_text(v) for v in (matrix[1] if len(matrix) > 1 else [])]
    if not first:
        return "none"

    # ------------------------------------------------------------------
    # 1. Header vs data signal scores
    # ------------------------------------------------------------------
    header_token_count = sum(1 for v in first if _looks_header_token(v))
    short_label_count = sum(1 for v in first if _is_short_label(v))
    date_count = sum(1 for v in first if looks_date_like(v))
    strength_count = sum(
        1 for v in first if _DOSE_RE.search(v) or _DOSE_RATIO_RE.search(v)
    )
    numeric_count = sum(1 for v in first if looks_numeric(v))
    country_count = sum(1 for v in first if _COUNTRY_RE.search(v.strip()))

    header_score = header_token_count + SHORT_LABEL_WEIGHT * short_label_count
    data_score = date_count + strength_count + numeric_count + country_count
    logger.debug(f"Header score {header_score}, data score {data_score}")

    if header_score >= MIN_SIGNAL_SCORE and header_score >= data_score:
        return "headers"
    if data_score >= MIN_SIGNAL_SCORE and data_score > header_score:
        return "none"

    # ------------------------------------------------------------------
    # 2. Ambiguous: compare value types of row 1 and row 2
    # ------------------------------------------------------------------
    same_type_count = 0
    if min(len(first), len(second)):
        for idx, value in enumerate(first):
            other = second[idx] if idx < len(second) else ""
            if _classify_cell(value) == _classify_cell(other):
                same_type_count += 1
    if same_type_count >= math.floor(len(first) * SAME_TYPE_RATIO):
        return "none"

    return "headers" if header_score > 0 else "none"


def build_raw_rows(matrix: list[list[object]], mode: str) -> list[dict[str, object]]:
    """
    Convert a matrix into key → value rows.

    In "headers" mode keys come from row 1 (trimmed; blank labels become
    col_N) and every later row is mapped, blank rows included so row
    numbering stays aligned with the file. In "none" mode keys are
    col_1..col_N over all rows and fully blank rows are dropped.
    """
    rows: list[dict[str, object]] = []

    if mode == "headers":
        if not matrix:
            return rows
        headers = [
            cell_text(h).strip() or f"col_{idx + 1}"
            for idx, h in enumerate(matrix[0])
        ]
        for values in matrix[1:]:
            rows.append(
                {h: (values[idx] if idx < len(values) else None) for idx, h in enumerate(headers)}
            )
        return rows

    width = max((len(r) for r in matrix), default=0)
    headers = [f"col_{idx + 1}" for idx in range(width)]
    for values in matrix:
        row = {h: (values[idx] if idx < len(values) else None) for idx, h in enumerate(headers)}
        if any(cell_text(v).strip() for v in row.values()):
            rows.append(row)
    return rows


def looks_date_like(value: str) -> bool:
    """ISO, DD/MM/YY(YY) or Excel-serial shaped text."""
    text = value.strip()
    return bool(
        _ISO_DATE_RE.match(text)
        or _LOCALE_DATE_RE.match(text)
        or _SERIAL_DATE_RE.match(text)
    )


def looks_numeric(value: str) -> bool:
    return bool(_NUMERIC_RE.match(value.strip()))


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _looks_header_token(value: str) -> bool:
    key = value.lower().strip()
    return any(token in key for token in HEADER_LEXICON_TOKENS)


def _is_short_label(value: str) -> bool:
    text = value.strip()
    if not text or re.search(r"\d", text):
        return False
    tokens = re.sub(r"[^A-Za-z\s]", " ", text).split()
    if not tokens or len(tokens) > SHORT_LABEL_MAX_TOKENS:
        return False
    return sum(len(t) for t in tokens) / len(tokens) <= SHORT_LABEL_MAX_AVG_LEN


def _classify_cell(value: str) -> str:
    text = value.strip()
    if not text:
        return "empty"
    if looks_date_like(text):
        return "date"
    if looks_numeric(text):
        return "num"
    if _UNIT_WORD_RE.search(text) or "/" in text:
        return "strength"
    if _FORM_WORD_RE.match(text):
        return "form"
    return "text"
