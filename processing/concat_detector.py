"""
Column-level detection of concatenated and free-text ("dirty") columns.

A column is flagged as concatenated when a trial decomposition of its
sampled cells finds at least two structural signals (strength, form, pack,
country, batch, GTIN) in ≥70% of the cells, and ingredient-list text makes
up no more than 30%. Columns that already look atomic (GTIN, price,
quantity, date, ISO-2 code, SKU-like code) and columns whose header is
trusted as one of those atomic fields are never considered.

Column hygiene is a cheaper pass over the same sample: a column is dirty
when ≥30% of its cells read as free text and <80% are plain numbers. Only
dirty columns are decomposed by the pipeline's concatenation overlay.

Public API:
    infer_concatenated_columns(rows) → list[ConcatColumn]
    is_atomic_content_column(values) → bool
    looks_formula_like(text) → bool
    classify_column_hygiene(rows) → dict[str, bool]
"""

import logging
import re
from dataclasses import dataclass

import pandas as pd

from config.header_synonyms import HEADER_TRUST_THRESHOLD
from processing import concat_decomposer
from processing.concat_decomposer import decompose_concatenated_cell
from processing.header_semantics import suggest_header_mappings
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------
CONCAT_SAMPLE_ROWS: int = 30
MIN_SIGNALS_PER_CELL: int = 2
MIN_SIGNAL_COVERAGE: float = 0.7
MAX_FORMULA_RATE: float = 0.3

DIRTY_MIN_FREE_TEXT_RATIO: float = 0.3
DIRTY_MAX_NUMERIC_RATIO: float = 0.8

# Header keys that, when trusted, mark a column as atomic.
ATOMIC_HEADER_KEYS: set[str] = {"gtin", "unit_price", "on_hand", "expiry_date", "coo", "sku"}

# ---------------------------------------------------------------------------
# Atomic-content patterns
# ---------------------------------------------------------------------------
_PRICE_RE = re.compile(r"^[-+]?\d+(?:[.,]\d{1,2})?(\s*(etb|birr|usd))?$", re.IGNORECASE)
_QTY_RE = re.compile(r"^\d+$")
_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_LOCALE_DATE_RE = re.compile(r"\b\d{2}[/-]\d{2}[/-]\d{2,4}\b")
_ISO2_RE = re.compile(r"^[A-Za-z]{2}$")
_CODE_RE = re.compile(r"^[A-Za-z0-9-]{6,}$")

# Detector's formula check does not treat kg/l as dose units.
_DETECTOR_UNIT_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|iu|ml|%)\b")

# ---------------------------------------------------------------------------
# Hygiene patterns
# ---------------------------------------------------------------------------
_NUMERIC_RE = re.compile(r"^[-+]?\d+(?:[.,]\d+)?$")
_DOSE_UNIT_RE = re.compile(r"(mg|mcg|g|ml|iu|%)", re.IGNORECASE)
_HYGIENE_COUNTRY_RE = re.compile(
    r"\b(ethiopia|india|germany|china|united states|united kingdom|france|italy|spain|kenya|south africa)\b",
    re.IGNORECASE,
)
HYGIENE_FORM_WORDS: set[str] = {
    "tablet", "tablets", "tab", "capsule", "capsules", "syrup", "suspension",
    "injection", "cream", "ointment", "gel", "drops", "drop", "spray",
    "lotion", "patch", "solution", "powder",
}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ConcatColumn:
    """A column flagged as holding concatenated product text."""

    index: int
    header: str
    reason: str


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def infer_concatenated_columns(rows: list[dict]) -> list[ConcatColumn]:
    """
    Flag columns whose cells encode several canonical fields at once.

    Args:
        rows: Raw rows; the first 30 are sampled.

    Returns:
        One ConcatColumn per flagged column, in column order.
    """
    keys = list(rows[0].keys()) if rows else []
    if not keys:
        return []
    sample = rows[:CONCAT_SAMPLE_ROWS]
    hints = {hint.header: hint for hint in suggest_header_mappings(sample, keys)}

    flagged: list[ConcatColumn] = []
    for idx, key in enumerate(keys):
        values = [cell_text(r.get(key)) for r in sample if cell_text(r.get(key)).strip()]
        if not values:
            continue
        if is_atomic_content_column(values):
            continue
        hint = hints.get(key)
        if hint and hint.confidence >= HEADER_TRUST_THRESHOLD and hint.key in ATOMIC_HEADER_KEYS:
            continue

        signal_rows = 0
        formula_rows = 0
        for value in values:
            if looks_formula_like(value):
                formula_rows += 1
                continue
            if _count_signals(value) >= MIN_SIGNALS_PER_CELL:
                signal_rows += 1

        coverage = signal_rows / len(values)
        formula_rate = formula_rows / len(values)
        if coverage >= MIN_SIGNAL_COVERAGE and formula_rate <= MAX_FORMULA_RATE:
            reason = (
                f"concat_signals>=2 in {coverage * 100:.0f}% rows; "
                f"formulaRate {round(formula_rate * 100)}%"
            )
            flagged.append(ConcatColumn(index=idx, header=key, reason=reason))
            logger.debug(f"Column '{key}' flagged as concatenated: {reason}")
    return flagged


def is_atomic_content_column(values: list) -> bool:
    """True when the sampled values already look like single atomic fields."""
    texts = [cell_text(v) for v in values]
    n = len(texts) or 1

    def share(predicate) -> float:
        return sum(1 for t in texts if predicate(t)) / n

    return (
        share(lambda t: len(re.sub(r"\D+", "", t.strip())) == 13) >= 0.6
        or share(lambda t: bool(_PRICE_RE.match(t.strip()))) >= 0.6
        or share(lambda t: bool(_QTY_RE.match(t.strip()))) >= 0.8
        or share(lambda t: bool(_ISO_DATE_RE.search(t) or _LOCALE_DATE_RE.search(t))) >= 0.6
        or share(lambda t: bool(_ISO2_RE.match(t.strip()))) >= 0.6
        or share(lambda t: bool(_CODE_RE.match(t.strip()))) >= 0.7
    )


def looks_formula_like(text: object) -> bool:
    """Ingredient-list shape, e.g. "Alumina, Magnesia and Simethicone"."""
    return concat_decomposer.looks_formula_like(text, unit_re=_DETECTOR_UNIT_RE)


def classify_column_hygiene(rows: list[dict]) -> dict[str, bool]:
    """
    Mark each column of the sample as dirty (free text) or clean.

    Every non-empty cell is classed as num, id (short token without a
    dose unit), free (whitespace, dose unit, form word or country name)
    or other. A column is dirty when free ≥ 30% and num < 80%.

    Returns:
        Column key → dirty flag, in column order of the first row.
    """
    keys = list(rows[0].keys()) if rows else []
    if not keys:
        return {}
    df = pd.DataFrame(rows, columns=keys)

    dirty: dict[str, bool] = {}
    for key in keys:
        cells = df[key].map(cell_text).str.strip()
        cells = cells[cells != ""]
        if cells.empty:
            dirty[key] = False
            continue
        shares = cells.map(_hygiene_class).value_counts(normalize=True)
        free_ratio = float(shares.get("free", 0.0))
        num_ratio = float(shares.get("num", 0.0))
        dirty[key] = free_ratio >= DIRTY_MIN_FREE_TEXT_RATIO and num_ratio < DIRTY_MAX_NUMERIC_RATIO

    logger.debug(f"Dirty columns: {[k for k, v in dirty.items() if v]}")
    return dirty


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _count_signals(value: str) -> int:
    decomposition = decompose_concatenated_cell(value)
    digits = re.sub(r"\D+", "", value)
    has_gtin = decomposition.has("identity.sku") or len(digits) == 13
    return sum(
        [
            decomposition.has("product.strength"),
            decomposition.has("product.form"),
            decomposition.has("pkg.pieces_per_unit"),
            decomposition.has("identity.coo"),
            decomposition.has("batch.batch_no"),
            has_gtin,
        ]
    )


def _hygiene_class(text: str) -> str:
    if _NUMERIC_RE.match(text):
        return "num"
    if len(text) <= 6 and not re.search(r"\s", text) and not _DOSE_UNIT_RE.search(text):
        return "id"
    tokens = [t for t in re.split(r"[^a-z]+", text.lower()) if t]
    if (
        re.search(r"\s", text)
        or _DOSE_UNIT_RE.search(text)
        or any(t in HYGIENE_FORM_WORDS for t in tokens)
        or _HYGIENE_COUNTRY_RE.search(text)
    ):
        return "free"
    return "other"
