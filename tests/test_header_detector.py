"""
Tests for processing/header_detector.py

Covers: header rows with lexicon tokens, data-shaped first rows, the
row-1 vs row-2 type comparison fallback, and raw-row construction in both
modes (blank header labels, short rows, blank-row handling).
"""

import pytest

from processing.header_detector import (
    build_raw_rows,
    detect_header_mode,
    looks_date_like,
    looks_numeric,
)


# ═══════════════════════════════════════════════════════════════════════════
# detect_header_mode
# ═══════════════════════════════════════════════════════════════════════════

class TestDetectHeaderMode:
    def test_lexicon_headers(self):
        matrix = [
            ["Generic Name", "Strength", "Expiry Date", "Qty"],
            ["Paracetamol", "500 mg", "2027-03-31", "10"],
        ]
        assert detect_header_mode(matrix) == "headers"

    def test_data_first_row(self):
        matrix = [
            ["Paracetamol", "500 mg", "2027-03-31", "10", "India"],
            ["Ibuprofen", "200 mg", "2026-01-31", "5", "Kenya"],
        ]
        assert detect_header_mode(matrix) == "none"

    def test_numeric_cells_count_as_data(self):
        matrix = [
            ["Amoxicillin", 250, 12.5, "2027-01-01"],
            ["Cetirizine", 10, 3.2, "2027-02-01"],
        ]
        assert detect_header_mode(matrix) == "none"

    def test_empty_matrix(self):
        assert detect_header_mode([]) == "none"

    def test_ambiguous_row_matching_row_two_is_data(self):
        matrix = [
            ["Paracetamol", "Tablet"],
            ["Ibuprofen", "Capsule"],
        ]
        assert detect_header_mode(matrix) == "none"


# ═══════════════════════════════════════════════════════════════════════════
# build_raw_rows
# ═══════════════════════════════════════════════════════════════════════════

class TestBuildRawRows:
    def test_headers_mode_keys_from_first_row(self):
        rows = build_raw_rows([["Name", " Qty "], ["A", 1], ["B"]], "headers")
        assert rows == [{"Name": "A", "Qty": 1}, {"Name": "B", "Qty": None}]

    def test_blank_header_label_becomes_col_n(self):
        rows = build_raw_rows([["Name", ""], ["A", "x"]], "headers")
        assert list(rows[0].keys()) == ["Name", "col_2"]

    def test_none_mode_synthetic_keys(self):
        rows = build_raw_rows([["A", 1], ["B", 2, "extra"]], "none")
        assert rows[0] == {"col_1": "A", "col_2": 1, "col_3": None}
        assert rows[1]["col_3"] == "extra"

    def test_none_mode_drops_blank_rows(self):
        rows = build_raw_rows([["A"], [""], [None], ["B"]], "none")
        assert [r["col_1"] for r in rows] == ["A", "B"]

    def test_headers_mode_empty_matrix(self):
        assert build_raw_rows([], "headers") == []


# ═══════════════════════════════════════════════════════════════════════════
# Cell-shape helpers
# ═══════════════════════════════════════════════════════════════════════════

class TestCellShapes:
    @pytest.mark.parametrize("value", ["2027-03-31", "31/03/2027", "31-03-27", "46000"])
    def test_date_like(self, value):
        assert looks_date_like(value)

    @pytest.mark.parametrize("value", ["March 2027", "Paracetamol", "12"])
    def test_not_date_like(self, value):
        assert not looks_date_like(value)

    @pytest.mark.parametrize("value, expected", [
        ("12", True), ("-3.5", True), ("1,25", True), ("12 mg", False), ("", False),
    ])
    def test_numeric(self, value, expected):
        assert looks_numeric(value) is expected
