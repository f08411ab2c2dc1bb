"""
Tests for utils/text_cleaning.py and utils/fuzzy_match.py

Covers: cell rendering of numbers/None/bools, whitespace sanitizing,
blank detection, thefuzz best-match lookup, and the rapidfuzz-backed
similarity measures.
"""

import pytest

from utils.fuzzy_match import best_match, jaro_winkler, levenshtein, token_set_dice
from utils.text_cleaning import cell_text, collapse_whitespace, is_blank, sanitize_string


# ═══════════════════════════════════════════════════════════════════════════
# Text cleaning
# ═══════════════════════════════════════════════════════════════════════════

class TestCellText:
    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        (500.0, "500"),
        (12.5, "12.5"),
        (7, "7"),
        (True, "true"),
        (float("nan"), ""),
        ("  keep  ", "  keep  "),
    ])
    def test_rendering(self, value, expected):
        assert cell_text(value) == expected


class TestSanitizeString:
    def test_line_breaks_and_nbsp(self):
        assert sanitize_string("Para cetamol\r\n 500  mg ") == "Para cetamol 500 mg"

    def test_collapse(self):
        assert collapse_whitespace("  a \t b  ") == "a b"

    def test_blank(self):
        assert is_blank("   ")
        assert is_blank(None)
        assert not is_blank(0)


# ═══════════════════════════════════════════════════════════════════════════
# Fuzzy matching
# ═══════════════════════════════════════════════════════════════════════════

class TestBestMatch:
    CANDIDATES = {"anti-infectives": "Anti-infectives", "respiratory": "Respiratory"}

    def test_match_above_threshold(self):
        value, score = best_match("Respiratry", self.CANDIDATES)
        assert value == "Respiratory"
        assert score >= 80

    def test_no_match(self):
        assert best_match("Oncology", self.CANDIDATES) == (None, 0)

    def test_empty_inputs(self):
        assert best_match("", self.CANDIDATES) == (None, 0)
        assert best_match("x", {}) == (None, 0)


class TestSimilarity:
    def test_token_set_dice(self):
        assert token_set_dice("Generic Name", "name generic") == 1.0
        assert token_set_dice("Batch No", "Batch") == pytest.approx(2 / 3)
        assert token_set_dice("", "") == 0.0

    def test_jaro_winkler_case_insensitive(self):
        assert jaro_winkler("EXPIRY", "expiry") == 1.0
        assert 0.0 < jaro_winkler("expiry", "expiration") < 1.0

    def test_levenshtein(self):
        assert levenshtein("tablet", "tablte") == 2
        assert levenshtein("cap", "caps") == 1
