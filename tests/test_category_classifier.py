"""
Tests for processing/category_classifier.py

Covers: category-code lookup, keyword scoring with the minimum-score
guardrail, labels, and "did you mean" suggestions.
"""

import pytest

from processing.category_classifier import (
    classify_umbrella_category,
    map_category_code_to_umbrella,
    suggest_medicine_category,
    umbrella_label,
)


class TestCategoryCodes:
    @pytest.mark.parametrize("code, expected", [
        ("ANT", "ANTI_INFECTIVES"),
        ("ant", "ANTI_INFECTIVES"),
        (" cvs ", "CARDIOVASCULAR"),
        ("FER", "OB_GYN"),
    ])
    def test_known_codes(self, code, expected):
        assert map_category_code_to_umbrella(code) == expected

    @pytest.mark.parametrize("code", ["", None, "XYZ"])
    def test_unknown_codes(self, code):
        assert map_category_code_to_umbrella(code) is None


class TestClassifier:
    def test_category_and_generic_agree(self):
        result = classify_umbrella_category(
            generic_name="Ciprofloxacin", category="Anti-infective"
        )
        assert result == "ANTI_INFECTIVES"

    def test_generic_alone_below_minimum(self):
        assert classify_umbrella_category(generic_name="Amoxicillin") is None

    def test_nothing_to_score(self):
        assert classify_umbrella_category() is None


class TestLabels:
    def test_label(self):
        assert umbrella_label("ANTI_INFECTIVES") == "Anti-infectives"

    def test_unknown_label(self):
        assert umbrella_label("NOPE") is None
        assert umbrella_label(None) is None

    def test_suggestion(self):
        assert suggest_medicine_category("Anti infectives") == "Anti-infectives"

    def test_no_suggestion_for_empty(self):
        assert suggest_medicine_category("") is None
