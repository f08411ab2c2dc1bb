"""
Quality checker — summarizes one import into a quality report.

Counts row-level problems by code and by field, splits them into blocking
errors and warnings, and computes per-field NA rates over the canonical
products (the share of rows where the field is empty or the "NA" fallback).

A code counts as a warning when it starts with "W_" or is one of
WARNING_CODES; every other code blocks the row it belongs to.

Public API:
    check_import_quality(result) → QualityReport
    flatten_products(rows) → pd.DataFrame
    is_warning_code(code) → bool
"""

import logging
from dataclasses import dataclass, field

import pandas as pd

from config.schema import NA_SENTINEL

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Codes that never block a row
# ---------------------------------------------------------------------------
WARNING_CODES: set[str] = {
    "E_FIELD_SUSPECT_VALUE",
    "E_TEXT_DIGITS_SUSPECT",
    "expired",
    "W_EXPIRED",
}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class QualityReport:
    """Summary statistics for one parsed import."""

    total_rows: int = 0
    parsed_rows: int = 0
    blocked_rows: int = 0
    error_count: int = 0
    blocking_count: int = 0
    warning_count: int = 0
    counts_by_code: dict[str, int] = field(default_factory=dict)
    counts_by_field: dict[str, int] = field(default_factory=dict)
    na_rates: dict[str, float] = field(default_factory=dict)
    is_clean: bool = True


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def check_import_quality(result) -> QualityReport:
    """
    Build a quality report for a ParsedImportResult.

    Args:
        result: ParsedImportResult from processing.pipeline.

    Returns:
        QualityReport. is_clean is True when nothing blocks.
    """
    report = QualityReport(
        total_rows=result.meta.total_rows,
        parsed_rows=result.meta.parsed_rows,
    )

    errors = pd.DataFrame(
        [{"row": e.row, "field": e.field, "code": e.code} for e in result.errors],
        columns=["row", "field", "code"],
    )
    if not errors.empty:
        errors["warning"] = errors["code"].map(is_warning_code)
        blocking = errors[~errors["warning"]]

        report.error_count = len(errors)
        report.warning_count = int(errors["warning"].sum())
        report.blocking_count = len(blocking)
        report.blocked_rows = int(blocking["row"].nunique())
        report.counts_by_code = {
            str(k): int(v) for k, v in errors["code"].value_counts().items()
        }
        report.counts_by_field = {
            str(k): int(v) for k, v in errors["field"].value_counts().items()
        }

    report.na_rates = _compute_na_rates(flatten_products(result.rows))
    report.is_clean = report.blocking_count == 0

    logger.info(
        f"Quality check complete: {report.parsed_rows}/{report.total_rows} rows, "
        f"{report.blocking_count} blocking, {report.warning_count} warnings, "
        f"{report.blocked_rows} blocked rows"
    )
    return report


def flatten_products(rows: list) -> pd.DataFrame:
    """One row per CanonicalProduct with dotted columns (product.generic_name, ...)."""
    if not rows:
        return pd.DataFrame()
    return pd.json_normalize([row.to_dict() for row in rows])


def is_warning_code(code: str) -> bool:
    return code.startswith("W_") or code in WARNING_CODES


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _compute_na_rates(frame: pd.DataFrame) -> dict[str, float]:
    """Percentage (one decimal) of rows per column that are empty or "NA"."""
    if frame.empty:
        return {}

    rates: dict[str, float] = {}
    total = len(frame)
    for column in frame.columns:
        values = frame[column]
        missing = values.isna() | values.astype(str).str.strip().isin(["", NA_SENTINEL])
        rates[column] = round(float(missing.sum()) / total * 100, 1)
    return rates
