"""
Tests for processing/header_semantics.py and processing/schema_detector.py

Covers:
  - header confidence scoring (exact synonyms, token overlap, negative
    tokens, value-type penalty, threshold)
  - synonym-table lookup, exact and fuzzy
  - source-schema detection order and legacy alias resolution
"""

import pytest

from config.schema import LEGACY_ITEMS_HEADERS, TEMPLATE_CHECKSUM, TEMPLATE_VERSION
from processing.header_semantics import (
    fuzzy_header_map,
    normalize_header_key,
    normalize_header_text,
    score_header,
    suggest_header_mappings,
)
from processing.schema_detector import (
    detect_source_schema,
    fnv1a32,
    headers_checksum,
    is_synthetic_header_set,
    looks_like_generic_csv,
    resolve_schema,
)


# ═══════════════════════════════════════════════════════════════════════════
# Header confidence scoring
# ═══════════════════════════════════════════════════════════════════════════

class TestScoreHeader:
    def test_exact_synonym(self):
        hint = score_header("Generic Name", ["Paracetamol"])
        assert hint.key == "generic_name"
        assert hint.confidence == 1.0

    def test_punctuation_ignored(self):
        hint = score_header("Expiry (Date)", [])
        assert hint.key == "expiry_date"

    def test_token_overlap_capped(self):
        hint = score_header("Batch Lot No", ["B1234"])
        assert hint.key == "batch_no"
        assert hint.confidence == 1.0

    def test_weak_overlap_unmapped(self):
        hint = score_header("Stock Level", ["10", "20"])
        assert hint.key is None
        assert 0.0 < hint.confidence < 0.6

    def test_type_mismatch_penalty(self):
        hint = score_header("Expiry Info", ["soon", "later"])
        assert hint.key is None

    def test_negative_token_blocks_generic(self):
        hint = score_header("Brand Generic Name", ["Panadol"])
        assert hint.key != "generic_name"

    def test_suggestions_keep_header_order(self):
        rows = [{"Qty": "5", "Generic": "Ibuprofen"}]
        hints = suggest_header_mappings(rows)
        assert [h.header for h in hints] == ["Qty", "Generic"]
        assert [h.key for h in hints] == ["on_hand", "generic_name"]

    def test_normalize_text(self):
        assert normalize_header_text("  Unit [Price] / EUR ") == "unit price eur"


class TestSynonymLookup:
    @pytest.mark.parametrize("header, expected", [
        ("Product Name", "brand_name"),
        ("Batch No.", "batch_no"),
        ("country of manufacture", "coo"),
        ("Unknown Col", None),
    ])
    def test_exact(self, header, expected):
        assert normalize_header_key(header) == expected

    def test_fuzzy(self):
        field_name, score = fuzzy_header_map("Expiry Dt")
        assert field_name == "expiry_date"
        assert score >= 0.8


# ═══════════════════════════════════════════════════════════════════════════
# Schema detection
# ═══════════════════════════════════════════════════════════════════════════

class TestDetectSourceSchema:
    def test_template_meta_wins(self):
        meta = {"template_version": TEMPLATE_VERSION, "header_checksum": TEMPLATE_CHECKSUM}
        assert detect_source_schema([{"Anything": 1}], meta) == "template_v3"

    def test_wrong_meta_ignored(self):
        meta = {"template_version": "Old_Template", "header_checksum": TEMPLATE_CHECKSUM}
        assert detect_source_schema([{"Foo": 1}], meta) == "unknown"

    def test_synthetic_keys_by_origin(self):
        rows = [{"col_1": "a", "col_2": "b"}]
        assert detect_source_schema(rows, origin="workbook") == "unknown"
        assert detect_source_schema(rows, origin="text") == "csv_generic"

    def test_legacy_items_headers_any_order(self):
        row = {h: None for h in reversed(LEGACY_ITEMS_HEADERS)}
        assert detect_source_schema([row]) == "concat_items"

    def test_generic_csv_tokens(self):
        assert detect_source_schema([{"Drug Name": "x", "Qty": 1}]) == "csv_generic"

    def test_unknown(self):
        assert detect_source_schema([{"Foo": 1, "Bar": 2}]) == "unknown"

    def test_no_rows(self):
        assert detect_source_schema([]) == "unknown"


class TestSchemaHelpers:
    def test_checksum_shape(self):
        digest = fnv1a32("generic|strength")
        assert len(digest) == 8
        assert all(c in "0123456789abcdef" for c in digest)

    def test_checksum_is_case_insensitive_over_headers(self):
        assert headers_checksum(["Generic", "Strength"]) == headers_checksum(["generic", "STRENGTH"])

    def test_checksum_distinguishes_order(self):
        assert headers_checksum(["a", "b"]) != headers_checksum(["b", "a"])

    def test_synthetic_header_set(self):
        assert is_synthetic_header_set(["col_1", "col_12"])
        assert not is_synthetic_header_set(["col_1", "Name"])
        assert not is_synthetic_header_set([])

    def test_resolve_schema(self):
        assert resolve_schema("legacy_items") == "concat_items"
        assert resolve_schema("template_v3") == "template_v3"
        with pytest.raises(ValueError):
            resolve_schema("mystery")

    def test_generic_csv_headers(self):
        assert looks_like_generic_csv(["Item Name", "Qty"])
        assert looks_like_generic_csv(["LOT / BATCH"])
        assert not looks_like_generic_csv(["Qty", "Supplier"])
