"""
Tests for processing/headerless_inference.py

Covers: per-column field scoring, GTIN columns never read as quantities,
greedy one-to-one assignment, and the guess payload (index, samples).
"""

from processing.headerless_inference import (
    infer_headerless_assignments,
    infer_headerless_guesses,
)


def _rows() -> list[dict]:
    return [
        {"col_1": "Paracetamol", "col_2": "500mg", "col_3": "2027-03-31", "col_4": "12", "col_5": "India"},
        {"col_1": "Ibuprofen", "col_2": "200mg", "col_3": "2026-11-30", "col_4": "20", "col_5": "Kenya"},
        {"col_1": "Amoxicillin", "col_2": "250mg", "col_3": "2028-01-31", "col_4": "35", "col_5": "Germany"},
        {"col_1": "Cetirizine", "col_2": "10mg", "col_3": "2027-07-31", "col_4": "7", "col_5": "China"},
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Assignment
# ═══════════════════════════════════════════════════════════════════════════

class TestAssignments:
    def test_typical_columns(self):
        assignment = infer_headerless_assignments(_rows())
        assert assignment == {
            "col_1": "generic_name",
            "col_2": "strength",
            "col_3": "expiry_date",
            "col_4": "on_hand",
            "col_5": "coo",
        }

    def test_each_field_used_once(self):
        rows = [{"col_1": "12", "col_2": "15"}, {"col_1": "20", "col_2": "30"}]
        assignment = infer_headerless_assignments(rows)
        assert list(assignment.values()).count("on_hand") == 1

    def test_gtin_column_is_sku_not_quantity(self):
        rows = [
            {"col_1": "5012345678900", "col_2": "Paracetamol"},
            {"col_1": "4006381333931", "col_2": "Ibuprofen tabs"},
        ]
        assignment = infer_headerless_assignments(rows)
        assert assignment["col_1"] == "sku"

    def test_no_rows(self):
        assert infer_headerless_assignments([]) == {}


# ═══════════════════════════════════════════════════════════════════════════
# Guesses
# ═══════════════════════════════════════════════════════════════════════════

class TestGuesses:
    def test_index_and_samples(self):
        guesses = infer_headerless_guesses(_rows())
        assert [g.index for g in guesses] == [0, 1, 2, 3, 4]
        assert guesses[0].sample == ["Paracetamol", "Ibuprofen", "Amoxicillin"]

    def test_candidates_sorted_descending(self):
        guess = infer_headerless_guesses(_rows())[2]
        scores = [score for _name, score in guess.candidates]
        assert scores == sorted(scores, reverse=True)
        assert guess.candidates[0] == ("expiry_date", 0.95)

    def test_gtin_zeroes_quantity(self):
        rows = [{"col_1": "5012345678900"}, {"col_1": "4006381333931"}]
        guess = infer_headerless_guesses(rows)[0]
        names = [name for name, _score in guess.candidates]
        assert "on_hand" not in names
        assert guess.candidates[0] == ("sku", 0.98)
