"""
Tests for processing/quality_checker.py

Covers: blocking vs. warning codes, blocked-row counting, counts by code
and field, NA rates over flattened products, and empty imports.
"""

import pytest

from processing.canonicalizer import (
    BatchInfo,
    CanonicalProduct,
    PackageInfo,
    ParsedRowError,
    ProductInfo,
)
from processing.pipeline import ImportMeta, ParsedImportResult
from processing.quality_checker import (
    check_import_quality,
    flatten_products,
    is_warning_code,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_rows() -> list[CanonicalProduct]:
    return [
        CanonicalProduct(
            product=ProductInfo(generic_name="Paracetamol", brand_name="NA", strength="500mg"),
            batch=BatchInfo(batch_no="B1234", expiry_date="2099-12-31", on_hand=100),
            pkg=PackageInfo(pieces_per_unit=10),
        ),
        CanonicalProduct(
            product=ProductInfo(generic_name="Amoxicillin", brand_name="Amoxil", strength="250mg"),
            batch=BatchInfo(batch_no="NA", expiry_date="", on_hand=5),
        ),
    ]


def _make_result(errors: list[ParsedRowError] | None = None) -> ParsedImportResult:
    return ParsedImportResult(
        rows=_make_rows(),
        errors=errors or [],
        meta=ImportMeta(total_rows=2, parsed_rows=2),
    )


def _make_errors() -> list[ParsedRowError]:
    return [
        ParsedRowError(2, "product.form", "E_REQUIRED_FORM", "form required"),
        ParsedRowError(2, "product.category", "E_REQUIRED_CATEGORY", "category required"),
        ParsedRowError(3, "product.description", "E_FIELD_SUSPECT_VALUE", "moved"),
        ParsedRowError(3, "identity.coo", "W_OPTIONAL_COO_MISSING", "COO recommended"),
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Error counting
# ═══════════════════════════════════════════════════════════════════════════

class TestErrorCounts:
    def test_clean_import(self):
        report = check_import_quality(_make_result())
        assert report.is_clean
        assert report.error_count == 0
        assert report.counts_by_code == {}
        assert report.total_rows == 2

    def test_blocking_and_warnings(self):
        report = check_import_quality(_make_result(_make_errors()))
        assert report.error_count == 4
        assert report.blocking_count == 2
        assert report.warning_count == 2
        assert report.blocked_rows == 1
        assert not report.is_clean

    def test_counts_by_code_and_field(self):
        errors = _make_errors() + [
            ParsedRowError(3, "product.form", "E_REQUIRED_FORM", "form required"),
        ]
        report = check_import_quality(_make_result(errors))
        assert report.counts_by_code["E_REQUIRED_FORM"] == 2
        assert report.counts_by_field["product.form"] == 2
        assert report.blocked_rows == 2

    def test_warnings_only_is_clean(self):
        errors = [ParsedRowError(2, "batch.expiry_date", "expired", "past")]
        report = check_import_quality(_make_result(errors))
        assert report.is_clean
        assert report.warning_count == 1


class TestWarningCodes:
    @pytest.mark.parametrize("code, expected", [
        ("W_OPTIONAL_STRENGTH_MISSING", True),
        ("E_FIELD_SUSPECT_VALUE", True),
        ("expired", True),
        ("E_REQUIRED_FORM", False),
        ("invalid_format", False),
    ])
    def test_is_warning_code(self, code, expected):
        assert is_warning_code(code) is expected


# ═══════════════════════════════════════════════════════════════════════════
# NA rates and flattening
# ═══════════════════════════════════════════════════════════════════════════

class TestNaRates:
    def test_rates(self):
        rates = check_import_quality(_make_result()).na_rates
        assert rates["product.generic_name"] == 0.0
        assert rates["product.brand_name"] == 50.0
        assert rates["product.manufacturer_name"] == 100.0
        assert rates["batch.batch_no"] == 50.0
        assert rates["batch.expiry_date"] == 50.0
        assert rates["pkg.pieces_per_unit"] == 50.0

    def test_no_rows(self):
        result = ParsedImportResult(meta=ImportMeta())
        report = check_import_quality(result)
        assert report.na_rates == {}
        assert report.is_clean


class TestFlattenProducts:
    def test_dotted_columns(self):
        frame = flatten_products(_make_rows())
        assert len(frame) == 2
        assert "product.generic_name" in frame.columns
        assert "batch.expiry_date" in frame.columns
        assert frame.loc[1, "product.brand_name"] == "Amoxil"

    def test_empty(self):
        assert flatten_products([]).empty
