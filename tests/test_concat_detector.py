"""
Tests for processing/concat_detector.py

Covers: concatenated-column flagging, atomic columns that are never
flagged, the detector's narrower formula check, and dirty-column hygiene.
"""

from processing import concat_decomposer
from processing.concat_detector import (
    classify_column_hygiene,
    infer_concatenated_columns,
    is_atomic_content_column,
    looks_formula_like,
)


def _item_rows() -> list[dict]:
    return [
        {"Item": "AMOXIL 500MG CAPS 100S INDIA B2231", "Qty": "10"},
        {"Item": "PANADOL 500MG TABS 24S GERMANY", "Qty": "4"},
        {"Item": "VENTOLIN 100MCG INHALER 200S CHINA", "Qty": "12"},
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Concatenated columns
# ═══════════════════════════════════════════════════════════════════════════

class TestInferConcatenatedColumns:
    def test_item_column_flagged(self):
        flagged = infer_concatenated_columns(_item_rows())
        assert [c.header for c in flagged] == ["Item"]
        assert flagged[0].index == 0
        assert flagged[0].reason.startswith("concat_signals>=2 in 100% rows")

    def test_plain_names_not_flagged(self):
        rows = [{"Generic": "Paracetamol"}, {"Generic": "Ibuprofen"}, {"Generic": "Amoxicillin"}]
        assert infer_concatenated_columns(rows) == []

    def test_ingredient_lists_not_flagged(self):
        rows = [
            {"Item": "Alumina, Magnesia and Simethicone"},
            {"Item": "Calcium carbonate and Magnesium"},
        ]
        assert infer_concatenated_columns(rows) == []

    def test_no_rows(self):
        assert infer_concatenated_columns([]) == []


class TestAtomicContent:
    def test_gtins(self):
        assert is_atomic_content_column(["5012345678900", "4006381333931"])

    def test_prices(self):
        assert is_atomic_content_column(["12.50", "3", "7.25 ETB"])

    def test_iso2_codes(self):
        assert is_atomic_content_column(["IN", "DE", "ET"])

    def test_free_text(self):
        assert not is_atomic_content_column(["Paracetamol 500mg", "Ibuprofen"])


class TestFormulaCheck:
    def test_kg_is_not_a_dose_unit_for_detection(self):
        text = "Calcium carbonate, Magnesium 2 kg"
        assert looks_formula_like(text)
        assert not concat_decomposer.looks_formula_like(text)


# ═══════════════════════════════════════════════════════════════════════════
# Column hygiene
# ═══════════════════════════════════════════════════════════════════════════

class TestColumnHygiene:
    def test_free_text_column_is_dirty(self):
        rows = [
            {"Name": "Paracetamol 500mg tablets", "Qty": "10", "Code": "AB12"},
            {"Name": "Ibuprofen syrup", "Qty": "5", "Code": "CD34"},
        ]
        assert classify_column_hygiene(rows) == {"Name": True, "Qty": False, "Code": False}

    def test_empty_column_clean(self):
        assert classify_column_hygiene([{"Note": ""}]) == {"Note": False}

    def test_no_rows(self):
        assert classify_column_hygiene([]) == {}
