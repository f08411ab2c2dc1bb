"""
Tests for processing/country_normalizer.py

Covers: ISO-2 passthrough, manual aliases (punctuated and native names),
exact English names, bounded fuzzy matching, rejection of non-countries,
and ISO-2 → display name lookup.
"""

import pytest

from processing.country_normalizer import (
    iso2_to_country_name,
    normalize_country_key,
    normalize_country_to_iso2,
)


# ═══════════════════════════════════════════════════════════════════════════
# normalize_country_to_iso2
# ═══════════════════════════════════════════════════════════════════════════

class TestNormalizeCountry:
    @pytest.mark.parametrize("text, expected", [
        ("U.S.A", "US"),
        ("America", "US"),
        ("UK", "GB"),
        ("Bharat", "IN"),
        ("KSA", "SA"),
        ("Ethiopia", "ET"),
        ("ethio", "ET"),
        ("Côte d'Ivoire", "CI"),
    ])
    def test_aliases(self, text, expected):
        assert normalize_country_to_iso2(text) == expected

    @pytest.mark.parametrize("text, expected", [("et", "ET"), ("IN", "IN"), ("de", "DE")])
    def test_iso2_codes(self, text, expected):
        assert normalize_country_to_iso2(text) == expected

    def test_exact_english_name(self):
        assert normalize_country_to_iso2("Brunei") == "BN"

    @pytest.mark.parametrize("text, expected", [
        ("Republic of India", "IN"),
        ("Taiwan", "TW"),
        ("united republic of tanzania", "TZ"),
    ])
    def test_official_and_common_names(self, text, expected):
        assert normalize_country_to_iso2(text) == expected

    def test_alpha3_code_is_not_a_name(self):
        assert normalize_country_to_iso2("IND") is None

    def test_fuzzy_prefix(self):
        assert normalize_country_to_iso2("Switzerland AG") == "CH"

    @pytest.mark.parametrize("text", ["Mars", "Narnia", "", "   ", None, "123"])
    def test_unresolvable(self, text):
        assert normalize_country_to_iso2(text) is None


class TestHelpers:
    def test_country_key_strips_accents_and_punctuation(self):
        assert normalize_country_key("Türkiye!") == "turkiye"

    def test_display_name(self):
        assert iso2_to_country_name("et") == "Ethiopia"

    def test_display_name_unknown(self):
        assert iso2_to_country_name("ZZ") is None
        assert iso2_to_country_name(None) is None

    def test_display_name_prefers_common_name(self):
        assert iso2_to_country_name("tw") == "Taiwan"
