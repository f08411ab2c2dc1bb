"""
Schema-specific mapping of raw rows into the flat canonical field bag.

Every source schema has one row in SCHEMA_POLICIES: the mapper turning a
raw row into a CanonicalFlat, the required-field list shown to preview
UIs, and the switches the canonicalizer consults for schema-dependent
validation. Adding a schema touches this table only.

Mappers:
  - template_v3:  fixed official headers, one column per field
  - concat_items: POS "Items" export, Name + Description regex blob
  - csv_generic / unknown: header hints → synonym table → fuzzy synonyms,
    or the headerless column assignment when one was inferred

Public API:
    map_raw_row(raw, schema, assignments=None) → CanonicalFlat | None
    extract_from_blob(text) → BlobFields
    parse_number(value) → int | float | None
    canonicalize_form(value) → str | None
"""

import logging
import re
from dataclasses import dataclass, field, fields
from typing import Callable

from config.countries import COUNTRY_LITERALS
from config.form_rules import FORM_SYNONYMS
from config.header_synonyms import FUZZY_HEADER_THRESHOLD
from config.schema import (
    CANONICAL_KEY_TO_FLAT,
    REQUIRED_FIELDS_CONCAT,
    REQUIRED_FIELDS_FULL,
    SCHEMA_CONCAT_ITEMS,
    SCHEMA_CSV_GENERIC,
    SCHEMA_TEMPLATE_V3,
    SCHEMA_UNKNOWN,
)
from processing.header_semantics import (
    fuzzy_header_map,
    normalize_header_key,
    suggest_header_mappings,
)
from processing.schema_detector import resolve_schema
from utils.text_cleaning import cell_text, sanitize_string

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Number parsing
# ---------------------------------------------------------------------------
# "1.234,5" style: dots group thousands, comma is the decimal mark
_EURO_NUMBER_RE = re.compile(r"^\d{1,3}(\.\d{3})*(,\d+)?$")
_FLOAT_PREFIX_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")

# ---------------------------------------------------------------------------
# Blob tokens (POS Name + Description)
# ---------------------------------------------------------------------------
_BLOB_RATIO_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|iu|ml)\s*/\s*\d*(?:\.\d+)?\s*(mg|mcg|g|ml)\b",
    re.IGNORECASE,
)
_BLOB_UNIT_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|iu|ml|%)\b", re.IGNORECASE)
_BLOB_DATE_RES: list[re.Pattern] = [
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"\b\d{2}/\d{2}/\d{4}\b"),
    re.compile(r"\b\d{2}-\d{2}-\d{2,4}\b"),
    re.compile(r"\b\d{3,5}\b"),
]
_BLOB_BATCH_RE = re.compile(r"\b(?:batch|bn|lot)[\s:#-]*([A-Za-z0-9-]+)\b", re.IGNORECASE)
_BLOB_PRICE_RE = re.compile(r"\b\d+(?:[.,]\d{1,2})?\s*(etb|birr|usd)?\b", re.IGNORECASE)
_BLOB_FORM_RE = re.compile(
    r"\b(tablets?|capsules?|syrup|suspension|injection|ointment|cream|gel|drops?"
    r"|inhaler|lotion|patch|suppository|powder|solution|spray)\b",
    re.IGNORECASE,
)
_BLOB_COUNTRY_RE = re.compile(
    r"\b(" + "|".join(re.escape(c) for c in COUNTRY_LITERALS) + r")\b",
    re.IGNORECASE,
)
_BLOB_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9\s-]{3,}")

# Flat fields parsed as numbers by the generic and headerless mappers
NUMERIC_FLAT_FIELDS: set[str] = {"on_hand", "unit_price", "pieces_per_unit"}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CanonicalFlat:
    """
    Intermediate per-row field bag, one optional attribute per flat field.

    Built by a schema mapper and mutated in place by the concatenation
    overlay before the canonicalizer sanitizes it. Text values may still
    be raw cells (str, int, float); numeric fields hold parsed numbers.
    """

    generic_name: str | None = None
    brand_name: str | None = None
    manufacturer_name: str | None = None
    strength: str | None = None
    form: str | None = None
    category: str | None = None
    requires_prescription: object = None
    is_controlled: object = None
    storage_conditions: str | None = None
    description: str | None = None
    batch_no: str | None = None
    expiry_date: object = None
    on_hand: float | int | None = None
    unit_price: float | int | None = None
    coo: str | None = None
    cat: str | None = None
    frm: str | None = None
    pkg: str | None = None
    sku: object = None
    purchase_unit: str | None = None
    pieces_per_unit: object = None
    unit: str | None = None
    product_type: str | None = None

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def get(self, key: str) -> object:
        return getattr(self, key)

    def set(self, key: str, value: object) -> None:
        if key not in _FLAT_FIELD_NAMES:
            raise KeyError(f"Unknown flat field: {key}")
        setattr(self, key, value)


@dataclass
class BlobFields:
    """Fields found by the regex battery over a POS Name + Description blob."""

    generic_name: str | None = None
    strength: str | None = None
    form: str | None = None
    expiry_date: str | None = None
    batch_no: str | None = None
    unit_price: float | int | None = None
    coo: str | None = None


@dataclass(frozen=True)
class SchemaPolicy:
    """
    Everything that varies by source schema.

    Attributes:
        mapper: raw row + optional headerless assignment → CanonicalFlat.
        required_fields: canonical paths reported in meta.required_fields.
        relaxed: dose-signal-present → whether core requiredness is
            relaxed to generic_name only.
        numeric_category_ids: category column may hold integer POS ids.
        optional_dose_fields: missing strength/expiry/COO are W_OPTIONAL_*
            warnings instead of E_REQUIRED_* errors.
        product_type_aware: product type is read, inferred and enforced.
    """

    mapper: Callable[[dict, dict | None], CanonicalFlat]
    required_fields: list[str] = field(default_factory=list)
    relaxed: Callable[[bool], bool] = lambda has_dose: False
    numeric_category_ids: bool = False
    optional_dose_fields: bool = False
    product_type_aware: bool = False


_FLAT_FIELD_NAMES: set[str] = set(CanonicalFlat.field_names())


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def map_raw_row(
    raw: dict,
    schema: str,
    assignments: dict[str, str] | None = None,
) -> CanonicalFlat | None:
    """
    Map one raw row into a CanonicalFlat with the schema's mapper.

    Args:
        raw: Header (or col_N) → cell value.
        schema: Source schema name; legacy aliases are accepted.
        assignments: Headerless column → flat field mapping, if inferred.

    Returns:
        The mapped bag, or None when every cell is blank.
    """
    if all(sanitize_string(v) == "" for v in raw.values()):
        return None
    policy = get_schema_policy(schema)
    return policy.mapper(raw, assignments)


def get_schema_policy(schema: str) -> SchemaPolicy:
    return SCHEMA_POLICIES[resolve_schema(schema)]


def parse_number(value: object) -> int | float | None:
    """
    Lenient number parse for mapped cells.

    "1.234,5" reads as 1234.5; otherwise commas are thousands separators.
    A leading numeric prefix is accepted ("12 tabs" → 12). Integral
    results come back as int.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _as_number(float(value))
    text = re.sub(r"\s", "", sanitize_string(value))
    if not text:
        return None
    if _EURO_NUMBER_RE.match(text):
        text = text.replace(".", "").replace(",", ".", 1)
    else:
        text = text.replace(",", "")
    match = _FLOAT_PREFIX_RE.match(text)
    if not match:
        return None
    return _as_number(float(match.group(0)))


def canonicalize_form(value: object) -> str | None:
    """Lowercased form with the mapping synonyms applied; None when empty."""
    text = sanitize_string(value).lower()
    if not text:
        return None
    return FORM_SYNONYMS.get(text, text)


def extract_from_blob(text: str) -> BlobFields:
    """
    Pull strength, form, expiry, batch, price, country and a leading name
    out of free text. Each pattern takes its first match only.
    """
    out = BlobFields()
    s = sanitize_string(text)
    if not s:
        return out

    # ---- 1. Strength: ratio first, then single unit
    ratio = _BLOB_RATIO_RE.search(s)
    unit = _BLOB_UNIT_RE.search(s)
    strength = ratio or unit
    if strength:
        out.strength = re.sub(r"\s+", "", strength.group(0))

    # ---- 2. Form
    form = _BLOB_FORM_RE.search(s)
    if form:
        out.form = canonicalize_form(form.group(0))

    # ---- 3. Expiry, most specific shape first
    for pattern in _BLOB_DATE_RES:
        date = pattern.search(s)
        if date:
            out.expiry_date = date.group(0)
            break

    # ---- 4. Batch / lot label
    batch = _BLOB_BATCH_RE.search(s)
    if batch:
        out.batch_no = batch.group(1)

    # ---- 5. Price
    price = _BLOB_PRICE_RE.search(s)
    if price:
        out.unit_price = parse_number(price.group(0))

    # ---- 6. Leading name
    name = _BLOB_NAME_RE.match(s)
    if name:
        out.generic_name = name.group(0)

    # ---- 7. Country
    country = _BLOB_COUNTRY_RE.search(s)
    if country:
        out.coo = country.group(0).title()

    return out


# ═══════════════════════════════════════════════════════════════════════════
# Schema mappers
# ═══════════════════════════════════════════════════════════════════════════

def map_template_v3_row(raw: dict, assignments: dict[str, str] | None = None) -> CanonicalFlat:
    """Official MedWay template: one fixed header per field."""
    def get(key: str) -> str:
        return sanitize_string(raw.get(key))

    return CanonicalFlat(
        generic_name=get("Generic (International Name)"),
        product_type=get("Product Type").lower() or None,
        strength=get("Strength"),
        form=canonicalize_form(get("Dosage Form")),
        category=get("Product Category") or None,
        expiry_date=get("Expiry Date"),
        batch_no=get("Batch / Lot Number"),
        on_hand=parse_number(raw.get("Item Quantity")),
        unit_price=parse_number(raw.get("Unit Price")),
        coo=get("Country of Manufacture") or None,
        sku=get("Serial Number") or None,
        brand_name=get("Brand Name") or None,
        manufacturer_name=get("Manufacturer") or None,
        description=get("Notes") or None,
        pieces_per_unit=parse_number(raw.get("Pack Contents")),
    )


def map_concat_items_row(raw: dict, assignments: dict[str, str] | None = None) -> CanonicalFlat:
    """POS Items export: fields come out of the Name + Description blob."""
    name = sanitize_string(raw.get("Name"))
    description = sanitize_string(raw.get("Description"))
    blob = extract_from_blob(" ".join(part for part in (name, description) if part))

    unit_price = parse_number(raw.get("Price"))
    if unit_price is None:
        unit_price = blob.unit_price

    return CanonicalFlat(
        generic_name=blob.generic_name or name or None,
        strength=blob.strength,
        form=blob.form,
        batch_no=blob.batch_no,
        expiry_date=blob.expiry_date,
        unit_price=unit_price,
        on_hand=parse_number(raw.get("Stock")),
        category=sanitize_string(raw.get("CategoryId")) or None,
        coo=blob.coo,
    )


def map_generic_row(raw: dict, assignments: dict[str, str] | None = None) -> CanonicalFlat:
    """
    Generic CSV/workbook: headerless assignment when one exists, else
    header hints, then the synonym table, then fuzzy synonyms (≥ 0.8).
    """
    if assignments:
        return _map_headerless_row(raw, assignments)

    flat = CanonicalFlat()
    hints = {
        hint.header: hint.key
        for hint in suggest_header_mappings([raw], list(raw.keys()))
        if hint.key
    }
    for header, value in raw.items():
        mapped = CANONICAL_KEY_TO_FLAT.get(hints.get(header, ""))
        if not mapped:
            mapped = normalize_header_key(header)
        if not mapped:
            best, score = fuzzy_header_map(header)
            if score >= FUZZY_HEADER_THRESHOLD:
                mapped = best
        if not mapped:
            continue

        if mapped in NUMERIC_FLAT_FIELDS:
            flat.set(mapped, parse_number(value))
        elif mapped == "form":
            flat.form = canonicalize_form(value)
        elif mapped == "product_type":
            flat.product_type = sanitize_string(value).lower()
        else:
            flat.set(mapped, sanitize_string(value))
    return flat


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _map_headerless_row(raw: dict, assignments: dict[str, str]) -> CanonicalFlat:
    flat = CanonicalFlat()
    for key, value in raw.items():
        mapped = assignments.get(key)
        if not mapped:
            continue
        if mapped in NUMERIC_FLAT_FIELDS:
            flat.set(mapped, parse_number(value))
        elif mapped == "form":
            flat.form = canonicalize_form(cell_text(value))
        else:
            flat.set(mapped, value)
    return flat


def _as_number(number: float) -> int | float | None:
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


# ---------------------------------------------------------------------------
# Schema policy table
# ---------------------------------------------------------------------------
SCHEMA_POLICIES: dict[str, SchemaPolicy] = {
    SCHEMA_TEMPLATE_V3: SchemaPolicy(
        mapper=map_template_v3_row,
        required_fields=REQUIRED_FIELDS_FULL,
        product_type_aware=True,
    ),
    SCHEMA_CONCAT_ITEMS: SchemaPolicy(
        mapper=map_concat_items_row,
        required_fields=REQUIRED_FIELDS_CONCAT,
        relaxed=lambda has_dose: not has_dose,
        numeric_category_ids=True,
        optional_dose_fields=True,
    ),
    SCHEMA_CSV_GENERIC: SchemaPolicy(
        mapper=map_generic_row,
        required_fields=REQUIRED_FIELDS_FULL,
    ),
    SCHEMA_UNKNOWN: SchemaPolicy(
        mapper=map_generic_row,
        required_fields=REQUIRED_FIELDS_FULL,
    ),
}
