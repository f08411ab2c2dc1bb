"""
Tests for processing/pipeline.py

Covers:
  - delimited text with a header row, end to end
  - headerless text files (column assignment, row numbering, guesses)
  - template workbooks recognised through the __meta sheet
  - concatenated-column decomposition and remainder routing
  - fast / deep analysis modes producing identical rows
  - apply_extraction and assign_leftover_text field rules
"""

import openpyxl
import pytest

from config.schema import REQUIRED_FIELDS_FULL, TEMPLATE_CHECKSUM, TEMPLATE_V3_HEADERS, TEMPLATE_VERSION
from processing.pipeline import (
    apply_extraction,
    assign_leftover_text,
    compute_sample_size,
    parse_products_core,
    parse_products_file,
)
from processing.row_mapper import CanonicalFlat


HEADER_CSV = (
    "Generic Name,Strength,Form,Category,Expiry Date,Batch No,Quantity,Country,Pack Contents\n"
    "Paracetamol,500mg,Tablet,Analgesics,2099-12-31,B1234,100,India,10\n"
    "Ibuprofen,200mg,Tablet,Analgesics,2099-06-30,B5678,50,Kenya,20\n"
).encode("utf-8")

HEADERLESS_CSV = (
    "Paracetamol,500mg,2099-03-31,12,India\n"
    "Ibuprofen,200mg,2099-11-30,20,Kenya\n"
    "Amoxicillin,250mg,2099-01-31,35,Germany\n"
    "Cetirizine,10mg,2099-07-31,7,China\n"
).encode("utf-8")


def _details_rows() -> list[dict]:
    return [
        {"Details": "AMOXIL 500MG CAPS 100S INDIA B2231", "Qty": "10"},
        {"Details": "PANADOL 500MG TABS 24S GERMANY", "Qty": "4"},
        {"Details": "VENTOLIN 100MCG INHALER 200S CHINA", "Qty": "12"},
    ]


# ═══════════════════════════════════════════════════════════════════════════
# parse_products_file
# ═══════════════════════════════════════════════════════════════════════════

class TestHeaderFile:
    def test_clean_rows(self):
        result = parse_products_file(HEADER_CSV, "stock.csv")
        assert result.errors == []
        assert len(result.rows) == 2
        first = result.rows[0]
        assert first.product.generic_name == "Paracetamol"
        assert first.product.form == "tablet"
        assert first.batch.coo == "IN"
        assert first.batch.on_hand == 100
        assert first.pkg.pieces_per_unit == 10

    def test_meta(self):
        meta = parse_products_file(HEADER_CSV, "stock.csv").meta
        assert meta.header_mode == "headers"
        assert meta.source_schema == "csv_generic"
        assert meta.required_fields == REQUIRED_FIELDS_FULL
        assert meta.total_rows == 2
        assert meta.parsed_rows == 2
        assert meta.column_guesses is None
        assert meta.read_errors == []

    def test_to_dict(self):
        data = parse_products_file(HEADER_CSV, "stock.csv").to_dict()
        assert set(data) == {"rows", "errors", "meta"}
        assert data["rows"][0]["product"]["generic_name"] == "Paracetamol"

    def test_unreadable_file(self):
        result = parse_products_file(b"", "empty.csv")
        assert result.rows == []
        assert result.meta.read_errors

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            parse_products_file(HEADER_CSV, "stock.csv", mode="thorough")


class TestHeaderlessFile:
    def test_columns_assigned(self):
        result = parse_products_file(HEADERLESS_CSV, "dump.csv")
        assert result.meta.header_mode == "none"
        assert len(result.rows) == 4
        first = result.rows[0]
        assert first.product.generic_name == "Paracetamol"
        assert first.product.strength == "500mg"
        assert first.batch.expiry_date == "2099-03-31"
        assert first.batch.on_hand == 12
        assert first.batch.coo == "IN"

    def test_rows_numbered_from_one(self):
        result = parse_products_file(HEADERLESS_CSV, "dump.csv")
        assert min(e.row for e in result.errors) == 1
        assert max(e.row for e in result.errors) == 4

    def test_column_guesses(self):
        guesses = parse_products_file(HEADERLESS_CSV, "dump.csv").meta.column_guesses
        assert len(guesses) == 5
        assert guesses[2]["index"] == 2
        assert guesses[2]["candidates"][0]["field"] == "batch.expiry_date"
        assert guesses[0]["sample_values"][0] == "Paracetamol"


class TestTemplateWorkbook:
    def test_template_detected(self, tmp_path):
        values = {
            "Generic (International Name)": "Amoxicillin",
            "Product Type": "medicine",
            "Strength": "500mg",
            "Dosage Form": "Capsule",
            "Product Category": "Anti-infectives",
            "Expiry Date": "31/12/2099",
            "Pack Contents": 100,
            "Batch / Lot Number": "B7788",
            "Item Quantity": 40,
            "Unit Price": 3.5,
            "Country of Manufacture": "IN",
        }
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.title = "products"
        sheet.append(TEMPLATE_V3_HEADERS)
        sheet.append([values.get(h) for h in TEMPLATE_V3_HEADERS])
        meta_sheet = workbook.create_sheet("__meta")
        meta_sheet.append(["template_version", TEMPLATE_VERSION])
        meta_sheet.append(["header_checksum", TEMPLATE_CHECKSUM])
        path = tmp_path / "template.xlsx"
        workbook.save(str(path))

        result = parse_products_file(path)
        assert result.meta.source_schema == "template_v3"
        assert result.meta.template_version == TEMPLATE_VERSION
        assert result.errors == []
        row = result.rows[0]
        assert row.identity.product_type == "medicine"
        assert row.batch.expiry_date == "2099-12-31"
        assert row.product.form == "capsule"


# ═══════════════════════════════════════════════════════════════════════════
# parse_products_core
# ═══════════════════════════════════════════════════════════════════════════

class TestConcatenatedColumns:
    def test_details_column_decomposed(self):
        result = parse_products_core(_details_rows(), origin="text")
        assert result.meta.concat_mode == "full"
        assert [c.header for c in result.meta.concatenated_columns] == ["Details"]
        assert result.meta.decomposed_columns == [{"index": 0, "header": "Details"}]

        first = result.rows[0]
        assert first.product.strength == "500mg"
        assert first.product.form == "capsule"
        assert first.pkg.pieces_per_unit == 100
        assert first.batch.coo == "IN"
        assert first.batch.batch_no == "B2231"
        assert first.batch.on_hand == 10

    def test_second_row(self):
        second = parse_products_core(_details_rows(), origin="text").rows[1]
        assert second.product.form == "tablet"
        assert second.batch.coo == "DE"
        assert second.pkg.pieces_per_unit == 24


class TestAnalysisModes:
    def test_rows_identical(self):
        fast = parse_products_core(_details_rows(), mode="fast")
        deep = parse_products_core(_details_rows(), mode="deep")
        assert fast.rows == deep.rows
        assert fast.errors == deep.errors
        assert fast.meta.sample_size == 3
        assert deep.meta.sample_size == 64

    def test_signal_rows_beyond_fast_sample(self):
        rows = [{"Name": f"Item {i}"} for i in range(40)]
        rows += [{"Name": "Paracetamol 500mg Tablet"} for _ in range(8)]
        fast = parse_products_core(rows, mode="fast")
        deep = parse_products_core(rows, mode="deep")
        assert fast.meta.sample_size == 32
        assert deep.meta.sample_size == 64
        assert fast.meta.concat_mode == deep.meta.concat_mode == "name_only"
        assert fast.rows == deep.rows
        assert fast.errors == deep.errors
        assert fast.rows[40].product.strength == "500mg"
        assert fast.rows[40].product.form == "tablet"

    @pytest.mark.parametrize("total, mode, expected", [
        (10, "fast", 10),
        (1000, "fast", 32),
        (10, "deep", 64),
        (1000, "deep", 250),
        (2000, "deep", 256),
    ])
    def test_sample_size(self, total, mode, expected):
        assert compute_sample_size(total, mode) == expected

    def test_no_rows(self):
        result = parse_products_core([])
        assert result.rows == []
        assert result.meta.total_rows == 0


# ═══════════════════════════════════════════════════════════════════════════
# Field rules
# ═══════════════════════════════════════════════════════════════════════════

class TestApplyExtraction:
    def test_free_field_written(self):
        flat = CanonicalFlat()
        assert apply_extraction(flat, "product.strength", "500mg")
        assert flat.strength == "500mg"

    def test_filled_field_kept(self):
        flat = CanonicalFlat(strength="250mg")
        assert not apply_extraction(flat, "product.strength", "500mg")
        assert flat.strength == "250mg"

    def test_source_cell_replaced(self):
        flat = CanonicalFlat(strength="Paracetamol 500mg")
        assert apply_extraction(flat, "product.strength", "500mg", "Paracetamol 500mg")
        assert flat.strength == "500mg"

    def test_labelled_batch_replaced(self):
        flat = CanonicalFlat(batch_no="LOT: B1234")
        assert apply_extraction(flat, "batch.batch_no", "B1234")
        assert flat.batch_no == "B1234"

    def test_numeric_field_kept(self):
        flat = CanonicalFlat(on_hand=5)
        assert not apply_extraction(flat, "batch.on_hand", 7)

    def test_unknown_path(self):
        assert not apply_extraction(CanonicalFlat(), "product.colour", "red")


class TestAssignLeftoverText:
    def test_untyped_fills_generic(self):
        flat = CanonicalFlat()
        assign_leftover_text(flat, None, "Amoxicillin")
        assert flat.generic_name == "Amoxicillin"

    def test_untyped_appends_description(self):
        flat = CanonicalFlat(generic_name="Amoxicillin", description="Keep dry")
        assign_leftover_text(flat, None, "GSK")
        assert flat.generic_name == "Amoxicillin"
        assert flat.description == "Keep dry GSK"

    def test_description_appended(self):
        flat = CanonicalFlat(generic_name="X", description="Keep cool")
        assign_leftover_text(flat, "product.description", "below 25C")
        assert flat.description == "Keep cool below 25C"

    def test_description_source_replaced(self):
        flat = CanonicalFlat(generic_name="X", description="AMOXIL 500MG")
        assign_leftover_text(flat, "product.description", "AMOXIL", "AMOXIL 500MG")
        assert flat.description == "AMOXIL"

    def test_brand_fills_empty_generic(self):
        flat = CanonicalFlat()
        assign_leftover_text(flat, "product.brand_name", "Amoxil")
        assert flat.brand_name == "Amoxil"
        assert flat.generic_name == "Amoxil"

    def test_filled_brand_kept(self):
        flat = CanonicalFlat(generic_name="Amoxicillin", brand_name="Amoxil")
        assign_leftover_text(flat, "product.brand_name", "Other")
        assert flat.brand_name == "Amoxil"

    def test_blank_text_ignored(self):
        flat = CanonicalFlat()
        assign_leftover_text(flat, None, "   ")
        assert flat.generic_name is None
