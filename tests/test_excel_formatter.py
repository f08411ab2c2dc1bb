"""
Tests for utils/excel_formatter.py

Covers: three-sheet creation, products column order, auto-filter and
frozen header, number formats, yellow fill on warning rows, the summary
sheet, and empty imports.
"""

from pathlib import Path

import openpyxl

from processing.canonicalizer import (
    BatchInfo,
    CanonicalProduct,
    PackageInfo,
    ParsedRowError,
    ProductInfo,
)
from processing.pipeline import ImportMeta, ParsedImportResult
from utils.excel_formatter import export_review_workbook, results_to_dataframe


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_result(with_rows: bool = True) -> ParsedImportResult:
    rows = [
        CanonicalProduct(
            product=ProductInfo(generic_name="Paracetamol", strength="500mg", form="tablet"),
            batch=BatchInfo(batch_no="B1234", expiry_date="2099-12-31", on_hand=1200, unit_price=2.5),
            pkg=PackageInfo(pieces_per_unit=10),
        ),
        CanonicalProduct(
            product=ProductInfo(generic_name="Ibuprofen", strength="200mg", form="tablet"),
            batch=BatchInfo(batch_no="B5678", expiry_date="2099-06-30", on_hand=50),
        ),
    ]
    errors = [
        ParsedRowError(2, "product.category", "E_REQUIRED_CATEGORY", "category required"),
        ParsedRowError(3, "identity.coo", "W_OPTIONAL_COO_MISSING", "COO recommended"),
    ]
    meta = ImportMeta(
        source_schema="csv_generic",
        total_rows=2,
        parsed_rows=2,
        read_errors=["Sheet '__meta' present but carries no template keys"],
    )
    if not with_rows:
        return ParsedImportResult(meta=ImportMeta())
    return ParsedImportResult(rows=rows, errors=errors, meta=meta)


def _save_and_load(tmp_path: Path, result: ParsedImportResult | None = None) -> openpyxl.Workbook:
    """Export the review workbook and re-open it for inspection."""
    output_path = tmp_path / "review.xlsx"
    export_review_workbook(result or _make_result(), output_path)
    return openpyxl.load_workbook(str(output_path))


# ═══════════════════════════════════════════════════════════════════════════
# Sheet structure
# ═══════════════════════════════════════════════════════════════════════════

class TestSheetStructure:
    def test_sheet_names(self, tmp_path):
        wb = _save_and_load(tmp_path)
        assert wb.sheetnames == ["Products", "Errors", "Import Summary"]
        wb.close()

    def test_returns_output_path(self, tmp_path):
        output_path = tmp_path / "nested" / "review.xlsx"
        assert export_review_workbook(_make_result(), output_path) == output_path
        assert output_path.exists()


# ═══════════════════════════════════════════════════════════════════════════
# Products sheet
# ═══════════════════════════════════════════════════════════════════════════

class TestProductsSheet:
    def test_leading_columns(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Products"]
        headers = [cell.value for cell in ws[1]]
        assert headers[0] == "product.generic_name"
        assert "pkg.pieces_per_unit" in headers
        wb.close()

    def test_data_rows_written(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Products"]
        assert ws["A2"].value == "Paracetamol"
        assert ws["A3"].value == "Ibuprofen"
        wb.close()

    def test_frozen_panes_and_filter(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Products"]
        assert ws.freeze_panes == "A2"
        assert ws.auto_filter.ref.startswith("A1:")
        assert ws.auto_filter.ref.endswith("3")
        wb.close()

    def test_number_format(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Products"]
        headers = [cell.value for cell in ws[1]]
        col = headers.index("batch.on_hand") + 1
        assert ws.cell(row=2, column=col).number_format == "#,##0"
        wb.close()

    def test_dataframe_order(self):
        frame = results_to_dataframe(_make_result())
        assert list(frame.columns[:2]) == ["product.generic_name", "product.brand_name"]

    def test_empty_import(self):
        frame = results_to_dataframe(_make_result(with_rows=False))
        assert frame.empty
        assert "product.generic_name" in frame.columns


# ═══════════════════════════════════════════════════════════════════════════
# Errors sheet
# ═══════════════════════════════════════════════════════════════════════════

class TestErrorsSheet:
    def test_error_row(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Errors"]
        assert [cell.value for cell in ws[1]] == ["Row", "Field", "Code", "Severity", "Message"]
        assert [cell.value for cell in ws[2]] == [
            2, "product.category", "E_REQUIRED_CATEGORY", "error", "category required",
        ]
        wb.close()

    def test_warning_row_is_yellow(self, tmp_path):
        wb = _save_and_load(tmp_path)
        ws = wb["Errors"]
        assert ws["D3"].value == "warning"
        assert ws["C3"].fill.start_color.rgb == "00FFFF00"
        assert ws["C2"].fill.fill_type is None
        wb.close()


# ═══════════════════════════════════════════════════════════════════════════
# Summary sheet
# ═══════════════════════════════════════════════════════════════════════════

class TestSummarySheet:
    def _labels(self, ws) -> dict:
        return {
            row[0].value: row[1].value if len(row) > 1 else None
            for row in ws.iter_rows()
            if row[0].value is not None
        }

    def test_meta_and_counts(self, tmp_path):
        wb = _save_and_load(tmp_path)
        labels = self._labels(wb["Import Summary"])
        assert wb["Import Summary"]["A1"].value == "Import Summary"
        assert labels["Source Schema"] == "csv_generic"
        assert labels["Blocked Rows"] == 1
        assert labels["Import Is Clean"] == "No"
        assert labels["E_REQUIRED_CATEGORY"] == 1
        wb.close()

    def test_read_errors_listed(self, tmp_path):
        wb = _save_and_load(tmp_path)
        labels = self._labels(wb["Import Summary"])
        assert "Read Errors" in labels
        assert "Sheet '__meta' present but carries no template keys" in labels
        wb.close()

    def test_na_rates_listed(self, tmp_path):
        wb = _save_and_load(tmp_path)
        labels = self._labels(wb["Import Summary"])
        assert labels["NA Rate by Field"] is None
        assert labels["product.brand_name"] == "100.0%"
        wb.close()
