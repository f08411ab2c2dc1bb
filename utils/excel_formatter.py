"""
Excel formatter — writes the import review workbook with three sheets.

Sheet 1: "Products" — one flattened row per canonical product, with
         dotted column names (product.generic_name, batch.expiry_date, ...).
Sheet 2: "Errors" — row-level problems; warnings get a yellow fill.
Sheet 3: "Import Summary" — detection metadata, quality counts, counts
         by code, and per-field NA rates.

Every table sheet gets a styled header row, a frozen header, an
auto-filter, and auto-fitted column widths.

Public API:
    results_to_dataframe(result) → pd.DataFrame
    export_review_workbook(result, output_path, quality=None) → Path
"""

import logging
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
import pandas as pd

from processing.quality_checker import (
    QualityReport,
    check_import_quality,
    flatten_products,
    is_warning_code,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

_YELLOW_FILL = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
_NORMAL_FONT = Font(size=10)
_BOLD_FONT = Font(bold=True, size=10)

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

_NUMBER_FORMATS: dict[str, str] = {
    "batch.on_hand": "#,##0",
    "batch.unit_price": "#,##0.00",
    "pkg.pieces_per_unit": "#,##0",
}

# Leading product columns, in this order; the rest follow as flattened.
_PRODUCT_COLUMN_ORDER: list[str] = [
    "product.generic_name",
    "product.brand_name",
    "product.manufacturer_name",
    "product.strength",
    "product.form",
    "product.category",
    "product.umbrella_category",
    "batch.batch_no",
    "batch.expiry_date",
    "batch.on_hand",
    "batch.unit_price",
    "batch.coo",
]

_ERROR_COLUMNS: list[str] = ["Row", "Field", "Code", "Severity", "Message"]


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def results_to_dataframe(result) -> pd.DataFrame:
    """
    Flatten the canonical products of a ParsedImportResult.

    Args:
        result: ParsedImportResult from processing.pipeline.

    Returns:
        DataFrame with the core product and batch columns first, then any
        pkg.* / identity.* / remaining columns.
    """
    frame = flatten_products(result.rows)
    if frame.empty:
        return pd.DataFrame(columns=_PRODUCT_COLUMN_ORDER)

    leading = [c for c in _PRODUCT_COLUMN_ORDER if c in frame.columns]
    trailing = [c for c in frame.columns if c not in leading]
    return frame[leading + trailing]


def export_review_workbook(
    result,
    output_path: Path,
    quality: QualityReport | None = None,
) -> Path:
    """
    Write the review workbook for one import.

    Args:
        result: ParsedImportResult to export.
        output_path: Path (or writable binary buffer) for the .xlsx file.
        quality: Precomputed QualityReport; computed when omitted.

    Returns:
        output_path, for convenience.
    """
    quality = quality or check_import_quality(result)
    workbook = openpyxl.Workbook()

    products_sheet = workbook.active
    products_sheet.title = "Products"
    _write_products_sheet(products_sheet, results_to_dataframe(result))

    errors_sheet = workbook.create_sheet("Errors")
    _write_errors_sheet(errors_sheet, result.errors)

    summary_sheet = workbook.create_sheet("Import Summary")
    _write_summary_sheet(summary_sheet, result.meta, quality)

    if isinstance(output_path, (str, Path)):
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(str(output_path))
    else:
        workbook.save(output_path)
    workbook.close()

    logger.info(f"Review workbook saved to '{output_path}'")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# Sheet 1: Products
# ═══════════════════════════════════════════════════════════════════════════

def _write_products_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    dataframe: pd.DataFrame,
) -> None:
    columns = list(dataframe.columns)
    _write_header_row(worksheet, columns)

    for row_offset, df_idx in enumerate(dataframe.index):
        excel_row = row_offset + 2
        for col_idx, col_name in enumerate(columns, start=1):
            value = dataframe.at[df_idx, col_name]
            if pd.isna(value):
                value = None
            cell = worksheet.cell(row=excel_row, column=col_idx, value=value)
            cell.font = _NORMAL_FONT
            fmt = _NUMBER_FORMATS.get(col_name)
            if fmt:
                cell.number_format = fmt

    _finish_table(worksheet, len(columns), len(dataframe))


# ═══════════════════════════════════════════════════════════════════════════
# Sheet 2: Errors
# ═══════════════════════════════════════════════════════════════════════════

def _write_errors_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    errors: list,
) -> None:
    _write_header_row(worksheet, _ERROR_COLUMNS)

    for row_offset, error in enumerate(errors):
        excel_row = row_offset + 2
        warning = is_warning_code(error.code)
        values = [
            error.row,
            error.field,
            error.code,
            "warning" if warning else "error",
            error.message,
        ]
        for col_idx, value in enumerate(values, start=1):
            cell = worksheet.cell(row=excel_row, column=col_idx, value=value)
            cell.font = _NORMAL_FONT
            if warning:
                cell.fill = _YELLOW_FILL

    _finish_table(worksheet, len(_ERROR_COLUMNS), len(errors))


# ═══════════════════════════════════════════════════════════════════════════
# Sheet 3: Import Summary
# ═══════════════════════════════════════════════════════════════════════════

def _write_summary_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    meta,
    quality: QualityReport,
) -> None:
    """Detection metadata, quality counts, counts by code, and NA rates."""
    current_row = 1
    worksheet.cell(row=current_row, column=1, value="Import Summary").font = Font(bold=True, size=14)
    current_row += 2

    summary_items = [
        ("Source Schema", meta.source_schema),
        ("Header Mode", meta.header_mode),
        ("Analysis Mode", meta.analysis_mode),
        ("Sample Size", meta.sample_size),
        ("Concat Mode", meta.concat_mode),
        ("Validation Mode", meta.validation_mode),
        ("Required Fields", ", ".join(meta.required_fields)),
        ("Template Version", meta.template_version or ""),
        ("Engine Version", meta.engine_version),
        ("Total Rows", quality.total_rows),
        ("Parsed Rows", quality.parsed_rows),
        ("Blocked Rows", quality.blocked_rows),
        ("Blocking Errors", quality.blocking_count),
        ("Warnings", quality.warning_count),
        ("Import Is Clean", "Yes" if quality.is_clean else "No"),
    ]
    for label, value in summary_items:
        worksheet.cell(row=current_row, column=1, value=label).font = _BOLD_FONT
        worksheet.cell(row=current_row, column=2, value=value).font = _NORMAL_FONT
        current_row += 1

    if meta.read_errors:
        current_row += 1
        worksheet.cell(row=current_row, column=1, value="Read Errors").font = _BOLD_FONT
        current_row += 1
        for message in meta.read_errors:
            worksheet.cell(row=current_row, column=1, value=message).font = _NORMAL_FONT
            current_row += 1

    # ── Counts by code ─────────────────────────────────────────────────
    current_row += 2
    worksheet.cell(row=current_row, column=1, value="Errors by Code").font = Font(bold=True, size=12)
    current_row += 1
    current_row = _write_small_table(
        worksheet, current_row, ["Code", "Count"], list(quality.counts_by_code.items())
    )

    # ── NA rates ───────────────────────────────────────────────────────
    current_row += 2
    worksheet.cell(row=current_row, column=1, value="NA Rate by Field").font = Font(bold=True, size=12)
    current_row += 1
    _write_small_table(
        worksheet,
        current_row,
        ["Field", "NA %"],
        [(name, f"{rate}%") for name, rate in quality.na_rates.items()],
    )

    _auto_fit_column_widths(worksheet)


# ═══════════════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════════════

def _write_header_row(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    headers: list[str],
    row: int = 1,
) -> None:
    for col_idx, header in enumerate(headers, start=1):
        cell = worksheet.cell(row=row, column=col_idx, value=header)
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")


def _write_small_table(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    start_row: int,
    headers: list[str],
    rows: list[tuple],
) -> int:
    """Write a header plus rows starting at start_row; returns the next free row."""
    _write_header_row(worksheet, headers, row=start_row)
    current_row = start_row + 1
    for values in rows:
        for col_idx, value in enumerate(values, start=1):
            worksheet.cell(row=current_row, column=col_idx, value=value).font = _NORMAL_FONT
        current_row += 1
    return current_row


def _finish_table(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    column_count: int,
    row_count: int,
) -> None:
    """Auto-fit, auto-filter, and freeze the header row of a table sheet."""
    _auto_fit_column_widths(worksheet)
    if column_count:
        last_col_letter = get_column_letter(column_count)
        worksheet.auto_filter.ref = f"A1:{last_col_letter}{row_count + 1}"
    worksheet.freeze_panes = "A2"


def _auto_fit_column_widths(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
) -> None:
    """
    Set column widths based on content length, clamped between
    _MIN_COL_WIDTH and _MAX_COL_WIDTH.
    """
    for column_cells in worksheet.columns:
        max_length = _MIN_COL_WIDTH
        col_letter = get_column_letter(column_cells[0].column)

        for cell in column_cells:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        worksheet.column_dimensions[col_letter].width = min(max_length + 2, _MAX_COL_WIDTH)
