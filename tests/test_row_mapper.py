"""
Tests for processing/row_mapper.py

Covers:
  - lenient number parsing (European decimals, thousands, prefixes)
  - form synonyms
  - POS Name + Description blob extraction
  - the template, POS items, generic and headerless mappers
  - the schema policy table
"""

import pytest

from config.schema import REQUIRED_FIELDS_CONCAT, REQUIRED_FIELDS_FULL
from processing.row_mapper import (
    CanonicalFlat,
    canonicalize_form,
    extract_from_blob,
    get_schema_policy,
    map_raw_row,
    parse_number,
)


# ═══════════════════════════════════════════════════════════════════════════
# Value helpers
# ═══════════════════════════════════════════════════════════════════════════

class TestParseNumber:
    @pytest.mark.parametrize("value, expected", [
        ("1.234,5", 1234.5),
        ("1,234,567", 1234567),
        ("12 tabs", 12),
        ("12.50", 12.5),
        (3.0, 3),
        (7, 7),
    ])
    def test_parsed(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", float("nan")])
    def test_unparseable(self, value):
        assert parse_number(value) is None

    def test_integral_results_are_int(self):
        assert isinstance(parse_number("40"), int)


class TestCanonicalizeForm:
    def test_synonym(self):
        assert canonicalize_form("TAB") == "tablet"

    def test_unknown_kept_lowercase(self):
        assert canonicalize_form("Elixir") == "elixir"

    def test_empty(self):
        assert canonicalize_form("  ") is None


class TestExtractFromBlob:
    def test_fields(self):
        blob = extract_from_blob(
            "Amoxicillin 250mg/5ml Suspension Batch: B123 Exp 2027-03-31 India"
        )
        assert blob.strength == "250mg/5ml"
        assert blob.form == "suspension"
        assert blob.batch_no == "B123"
        assert blob.expiry_date == "2027-03-31"
        assert blob.coo == "India"
        assert blob.generic_name.startswith("Amoxicillin")

    def test_empty(self):
        blob = extract_from_blob("")
        assert blob.strength is None
        assert blob.generic_name is None


# ═══════════════════════════════════════════════════════════════════════════
# Mappers
# ═══════════════════════════════════════════════════════════════════════════

class TestMapRawRow:
    def test_blank_row(self):
        assert map_raw_row({"A": "", "B": None}, "csv_generic") is None

    def test_template_row(self):
        raw = {
            "Generic (International Name)": "Paracetamol",
            "Product Type": "Medicine",
            "Strength": "500mg",
            "Dosage Form": "Tab",
            "Product Category": "Analgesics",
            "Expiry Date": "31/12/2027",
            "Batch / Lot Number": "B1234",
            "Item Quantity": "100",
            "Unit Price": "2.50",
            "Country of Manufacture": "IN",
            "Serial Number": "",
            "Pack Contents": "10",
        }
        flat = map_raw_row(raw, "template_v3")
        assert flat.generic_name == "Paracetamol"
        assert flat.product_type == "medicine"
        assert flat.form == "tablet"
        assert flat.on_hand == 100
        assert flat.unit_price == 2.5
        assert flat.pieces_per_unit == 10
        assert flat.sku is None
        assert flat.brand_name is None

    def test_concat_items_row(self):
        raw = {
            "Name": "Paracetamol 500mg Tablet",
            "Description": "",
            "Price": "12.50",
            "Stock": "30",
            "CategoryId": "7",
        }
        flat = map_raw_row(raw, "legacy_items")
        assert flat.generic_name == "Paracetamol 500mg Tablet"
        assert flat.strength == "500mg"
        assert flat.form == "tablet"
        assert flat.unit_price == 12.5
        assert flat.on_hand == 30
        assert flat.category == "7"

    def test_generic_row(self):
        raw = {"Generic Name": "Ibuprofen", "Qty": "40", "Form": "TAB", "Expiry": "2027-01-31"}
        flat = map_raw_row(raw, "csv_generic")
        assert flat.generic_name == "Ibuprofen"
        assert flat.on_hand == 40
        assert flat.form == "tablet"
        assert flat.expiry_date == "2027-01-31"

    def test_unmapped_headers_ignored(self):
        flat = map_raw_row({"Generic Name": "Ibuprofen", "Zzz": "noise"}, "unknown")
        assert flat.generic_name == "Ibuprofen"
        assert flat.description is None

    def test_headerless_assignment(self):
        raw = {"col_1": "Paracetamol", "col_2": "12", "col_3": "Tab"}
        assignments = {"col_1": "generic_name", "col_2": "on_hand", "col_3": "form"}
        flat = map_raw_row(raw, "csv_generic", assignments)
        assert flat.generic_name == "Paracetamol"
        assert flat.on_hand == 12
        assert flat.form == "tablet"

    def test_unknown_schema(self):
        with pytest.raises(ValueError):
            map_raw_row({"A": "x"}, "mystery")


class TestCanonicalFlat:
    def test_set_unknown_field(self):
        with pytest.raises(KeyError):
            CanonicalFlat().set("colour", "red")

    def test_on_hand_starts_empty(self):
        assert CanonicalFlat().on_hand is None


# ═══════════════════════════════════════════════════════════════════════════
# Schema policies
# ═══════════════════════════════════════════════════════════════════════════

class TestSchemaPolicy:
    def test_concat_items_policy(self):
        policy = get_schema_policy("legacy_items")
        assert policy.required_fields == REQUIRED_FIELDS_CONCAT
        assert policy.numeric_category_ids
        assert policy.optional_dose_fields
        assert policy.relaxed(False)
        assert not policy.relaxed(True)

    def test_template_policy(self):
        policy = get_schema_policy("template_v3")
        assert policy.required_fields == REQUIRED_FIELDS_FULL
        assert policy.product_type_aware
        assert not policy.relaxed(False)
