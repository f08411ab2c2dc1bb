"""
Row canonicalizer and validator.

Turns one mapped CanonicalFlat into a nested CanonicalProduct plus the
row's ParsedRowErrors. Steps run in a fixed order, each feeding the next:

  1. Product type (template rows): read, infer when absent, enforce
  2. Field sanitizers over the whole bag (sanitize_row)
  3. Validation-mode filtering of sanitizer issues
  4. Requiredness, relaxed for POS rows without a dose signal
  5. Expiry cross-check (expired / invalid_format)
  6. Category membership for medicine / non-medicine template rows
  7. Sanity pass: values breaking cross-field invariants are demoted into
     the description and reported as E_FIELD_SUSPECT_VALUE
  8. Umbrella category (code map, else text classifier)
  9. "NA" fallback for optional text left empty

Rows are never dropped here; the worst case is a row full of errors.
validationMode "none" still normalizes every field, so the canonical
rows are identical across modes.

Public API:
    sanitize_row(flat, schema) → (SanitizedRow, list[Issue])
    sanitize_canonical_row(flat, row_index, schema,
                           validation_mode="full", config=...) → RowResult
"""

import logging
import re
from dataclasses import asdict, dataclass, field, replace

from config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from config.form_rules import (
    BRAND_MAX_LENGTH,
    COO_COMPANY_WORDS,
    FORM_ENUM,
    MANUFACTURER_HINT_WORDS,
    MAX_PUNCTUATION_MARKS,
    SANITIZER_FORM_SYNONYMS,
)
from config.schema import (
    EMPTYISH_VALUES,
    NA_SENTINEL,
    NON_MEDICINE_CATEGORY_LABELS,
    VALIDATION_MODES,
)
from config.umbrella_categories import (
    ACCESSORIES_LABEL,
    ACCESSORY_KEYWORDS,
    CHEMICAL_KEYWORDS,
    CHEMICALS_LABEL,
    MEDICINE_CATEGORY_LABELS,
)
from processing.category_classifier import (
    classify_umbrella_category,
    map_category_code_to_umbrella,
    suggest_medicine_category,
    umbrella_label,
)
from processing.country_normalizer import normalize_country_to_iso2
from processing.row_mapper import CanonicalFlat, get_schema_policy
from processing.sanitizers import (
    STRENGTH_LIKE_RE,
    Issue,
    has_digit,
    has_unit_token,
    is_alphanumeric_batch,
    is_future_date,
    parse_date_flexible,
    punctuation_count,
    sanitize_batch_no,
    sanitize_bool,
    sanitize_cat,
    sanitize_coo,
    sanitize_form,
    sanitize_frm,
    sanitize_number,
    sanitize_pkg,
    sanitize_strength,
    sanitize_text,
)
from processing.schema_detector import resolve_schema
from utils.text_cleaning import cell_text, collapse_whitespace

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Issue field → dotted canonical path
# ---------------------------------------------------------------------------
ISSUE_FIELD_PATHS: dict[str, str] = {
    "generic_name": "product.generic_name",
    "strength": "product.strength",
    "form": "product.form",
    "category": "product.category",
    "manufacturer_name": "product.manufacturer_name",
    "requires_prescription": "product.requires_prescription",
    "is_controlled": "product.is_controlled",
    "batch_no": "batch.batch_no",
    "expiry_date": "batch.expiry_date",
    "on_hand": "batch.on_hand",
    "unit_price": "batch.unit_price",
    "coo": "identity.coo",
    "cat": "identity.cat",
    "frm": "identity.frm",
    "pkg": "identity.pkg",
    "sku": "identity.sku",
}

SUSPECT_MESSAGE: str = "value failed invariants; moved to description"

# ---------------------------------------------------------------------------
# Sanity-pass patterns
# ---------------------------------------------------------------------------
_FORM_WORDS: list[str] = [*SANITIZER_FORM_SYNONYMS.keys(), *FORM_ENUM]
_FORM_WORD_RE = re.compile(
    r"\b(" + "|".join(re.escape(w) for w in _FORM_WORDS) + r")s?\b", re.IGNORECASE
)
_GENERIC_UNIT_RE = re.compile(
    r"\b(\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l|iu|%)\b"
    r"(?:\s*/\s*\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l|%))?)",
    re.IGNORECASE,
)
_MANUFACTURER_HINT_RE = re.compile(
    r"\b(" + "|".join(MANUFACTURER_HINT_WORDS) + r")\b", re.IGNORECASE
)
_COO_COMPANY_RE = re.compile(r"\b(" + "|".join(COO_COMPANY_WORDS) + r")\b", re.IGNORECASE)
_NUMERIC_TEXT_RE = re.compile(r"^\d+(?:\.\d+)?$")
_PURE_INT_RE = re.compile(r"^\d+$")
_DUPLICATED_TEXT_RE = re.compile(r"^(.+)\s+\1$", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Product-type inference
# ---------------------------------------------------------------------------
_KNOWN_FORMS: set[str] = {*SANITIZER_FORM_SYNONYMS.keys(), *(f.lower() for f in FORM_ENUM)}
_STRENGTH_SHAPE_RE = re.compile(
    r"^(?:\d+(?:[.,]\d+)?)\s*(mg|mcg|g|kg|ml|l|iu|%)"
    r"(?:\s*/\s*\d+(?:[.,]\d+)?\s*(mg|mcg|g|kg|ml|l|%))?$",
    re.IGNORECASE,
)
_STRENGTH_TOKEN_RE = re.compile(r"\b\d+(?:[.,]\d+)?\s*(mg|mcg|g|kg|ml|l|iu|%)\b", re.IGNORECASE)
_MEDICINE_LABELS_LOWER: set[str] = {label.lower() for label in MEDICINE_CATEGORY_LABELS}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ProductInfo:
    generic_name: str = ""
    brand_name: str | None = None
    manufacturer_name: str | None = None
    strength: str = ""
    form: str = ""
    category: str | None = None
    requires_prescription: bool | None = None
    is_controlled: bool | None = None
    storage_conditions: str | None = None
    description: str | None = None
    umbrella_category: str | None = None


@dataclass
class BatchInfo:
    batch_no: str = ""
    expiry_date: str = ""           # ISO YYYY-MM-DD or ""
    on_hand: float = 0
    unit_price: float | None = None
    coo: str | None = None


@dataclass
class PackageInfo:
    pieces_per_unit: float


@dataclass
class IdentityInfo:
    """Raw coded fields kept for traceability."""

    cat: str | None = None
    frm: str | None = None
    pkg: str | None = None
    coo: str | None = None
    sku: str | None = None
    purchase_unit: str | None = None
    unit: str | None = None
    product_type: str | None = None


@dataclass
class CanonicalProduct:
    """One output record: product, batch, and optional pkg / identity groups."""

    product: ProductInfo = field(default_factory=ProductInfo)
    batch: BatchInfo = field(default_factory=BatchInfo)
    pkg: PackageInfo | None = None
    identity: IdentityInfo | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class ParsedRowError:
    """Public row-level problem: 1-based sheet row, dotted field path, code."""

    row: int
    field: str
    code: str
    message: str


@dataclass
class RowResult:
    row: CanonicalProduct
    errors: list[ParsedRowError] = field(default_factory=list)


@dataclass
class SanitizedRow:
    """Field bag after the sanitizers ran, before requiredness checks."""

    generic_name: str = ""
    brand_name: str | None = None
    manufacturer_name: str | None = None
    strength: str | None = None
    form: str | None = None
    category: str | None = None
    requires_prescription: bool | None = None
    is_controlled: bool | None = None
    storage_conditions: str | None = None
    description: str | None = None
    batch_no: str | None = None
    expiry_date: str | None = None  # ISO when parseable, else the raw text
    on_hand: float | None = None
    unit_price: float | None = None
    purchase_unit: str | None = None
    pieces_per_unit: str | None = None
    unit: str | None = None
    cat: str | None = None
    frm: str | None = None
    pkg: str | None = None
    coo: str | None = None
    sku: str | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def sanitize_row(flat: CanonicalFlat, schema: str | None = None) -> tuple[SanitizedRow, list[Issue]]:
    """
    Run every field sanitizer over a flat bag.

    Category handling depends on the schema: POS exports may carry integer
    category ids, which pass; elsewhere a numeric category is rejected.

    Returns:
        (sanitized row, issues in field order)
    """
    numeric_category_ids = bool(schema) and get_schema_policy(schema).numeric_category_ids
    issues: list[Issue] = []
    out = SanitizedRow()

    # ---- 1. Names and form
    out.generic_name = collapse_whitespace(flat.generic_name)
    if not out.generic_name:
        issues.append(Issue("generic_name", "E_GENERIC_MISSING", "generic_name required"))

    form = sanitize_form(flat.form)
    out.form = form.value
    issues.extend(form.issues)

    out.brand_name = sanitize_text(flat.brand_name)
    out.manufacturer_name = sanitize_text(flat.manufacturer_name)
    if out.manufacturer_name and (has_digit(out.manufacturer_name) or has_unit_token(out.manufacturer_name)):
        issues.append(
            Issue("manufacturer_name", "E_TEXT_DIGITS_SUSPECT",
                  "manufacturer must not contain digits/units", "warn")
        )

    strength = sanitize_strength(flat.strength)
    out.strength = strength.value
    issues.extend(strength.issues)

    # ---- 2. Category text
    out.category = sanitize_text(flat.category)
    if out.category:
        category = out.category
        if numeric_category_ids:
            if not _PURE_INT_RE.match(category) and (
                has_unit_token(category) or (has_digit(category) and re.search(r"[A-Za-z]", category))
            ):
                issues.append(
                    Issue("category", "W_CATEGORY_SUSPECT", "category rejected (digits/units)", "warn")
                )
                out.category = None
        else:
            if _NUMERIC_TEXT_RE.match(category):
                issues.append(Issue("category", "E_CATEGORY_NUMERIC", "category cannot be numeric"))
                out.category = None
            if has_digit(category) or has_unit_token(category):
                issues.append(
                    Issue("category", "E_TEXT_DIGITS_SUSPECT",
                          "category must not contain digits/units", "warn")
                )

    # ---- 3. Flags and free text
    for name in ("requires_prescription", "is_controlled"):
        flag = sanitize_bool(getattr(flat, name))
        setattr(out, name, flag.value)
        issues.extend(_retag(flag.issues, name))
    out.storage_conditions = sanitize_text(flat.storage_conditions)
    out.description = sanitize_text(flat.description)

    # ---- 4. Batch, expiry, quantity, price
    batch = sanitize_batch_no(flat.batch_no)
    quantity = sanitize_number(flat.on_hand, ge=0)
    price = sanitize_number(flat.unit_price, gt=0)
    issues.extend(batch.issues)
    issues.extend(_retag(quantity.issues, "on_hand"))
    issues.extend(_retag(price.issues, "unit_price"))

    out.batch_no = batch.value or None
    out.expiry_date = parse_date_flexible(flat.expiry_date) or sanitize_text(flat.expiry_date)
    out.on_hand = quantity.value
    out.unit_price = price.value

    out.purchase_unit = sanitize_text(flat.purchase_unit)
    out.pieces_per_unit = sanitize_text(flat.pieces_per_unit)
    out.unit = sanitize_text(flat.unit)

    # ---- 5. Coded identity fields, validated only when present
    for name, sanitizer in (("cat", sanitize_cat), ("frm", sanitize_frm), ("pkg", sanitize_pkg)):
        value = getattr(flat, name)
        if cell_text(value).strip():
            result = sanitizer(value)
            setattr(out, name, result.value)
            issues.extend(result.issues)

    if cell_text(flat.coo).strip():
        coo_raw = collapse_whitespace(flat.coo)
        if has_digit(coo_raw):
            issues.append(Issue("coo", "E_TEXT_DIGITS_SUSPECT", "country must not contain digits", "warn"))
        if _NUMERIC_TEXT_RE.match(coo_raw):
            issues.append(Issue("coo", "E_COO_NUMERIC", "country cannot be numeric"))
        else:
            coo = sanitize_coo(normalize_country_to_iso2(cell_text(flat.coo)) or cell_text(flat.coo))
            out.coo = coo.value
            issues.extend(coo.issues)

    out.sku = sanitize_text(flat.sku)
    return out, issues


def sanitize_canonical_row(
    flat: CanonicalFlat,
    row_index: int,
    schema: str,
    validation_mode: str = "full",
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> RowResult:
    """
    Canonicalize and validate one mapped row.

    Args:
        flat: Mapped field bag; it is copied, never mutated.
        row_index: 1-based sheet row (header row is row 1).
        schema: Source schema of the file.
        validation_mode: "full", "errorsOnly" (warnings dropped) or "none".
        config: Allow-lists for digit-bearing brand/manufacturer names.

    Returns:
        RowResult with the canonical record and its errors.

    Raises:
        ValueError: unknown validation mode or schema.
    """
    if validation_mode not in VALIDATION_MODES:
        raise ValueError(f"Unknown validation mode: {validation_mode!r}")
    schema = resolve_schema(schema)
    policy = get_schema_policy(schema)
    report = validation_mode != "none"
    flat = replace(flat)
    errors: list[ParsedRowError] = []

    def flag(path: str, code: str, message: str) -> None:
        if report:
            errors.append(ParsedRowError(row=row_index, field=path, code=code, message=message))

    # ---- 1. Product type
    product_type = ""
    if policy.product_type_aware:
        product_type = collapse_whitespace(flat.product_type).lower()
        if not product_type:
            product_type = _infer_product_type(flat)
    is_medicine = product_type == "medicine"
    is_non_medicine = product_type == "non-medicine"
    if is_non_medicine:
        flat.strength = None
        flat.form = None
        flat.expiry_date = None

    # ---- 2. Sanitizers
    row, issues = sanitize_row(flat, schema)
    relaxed = policy.relaxed(bool(row.strength))
    dose_required = not relaxed and not is_non_medicine
    if policy.numeric_category_ids:
        issues = [i for i in issues if not (i.field == "category" and i.code == "E_TEXT_DIGITS_SUSPECT")]
    if not dose_required:
        issues = [i for i in issues if not (i.field == "form" and i.code == "E_FORM_MISSING")]

    # ---- 3. Validation-mode filtering
    if validation_mode == "errorsOnly":
        issues = [i for i in issues if i.level == "error"]
    for issue in issues:
        flag(ISSUE_FIELD_PATHS.get(issue.field, issue.field), issue.code, issue.msg)

    if policy.product_type_aware:
        if not product_type:
            flag("identity.product_type", "E_PRODUCT_TYPE_MISSING",
                 "Product Type required (medicine | non-medicine)")
        elif not (is_medicine or is_non_medicine):
            flag("identity.product_type", "E_PRODUCT_TYPE_INVALID",
                 "Product Type must be medicine or non-medicine")
    if is_non_medicine:
        errors = [e for e in errors if not (e.field == "product.form" and e.code.startswith("E_FORM"))]

    # ---- 4. Requiredness
    if not row.generic_name and not row.brand_name:
        flag("product.generic_name", "E_PRODUCT_NAME_REQUIRED", "Product name required")
    if _emptyish(row.generic_name):
        flag("product.generic_name", "E_REQUIRED_GENERIC_NAME", "generic_name required")
    if dose_required:
        if _emptyish(row.strength):
            if policy.optional_dose_fields:
                flag("product.strength", "W_OPTIONAL_STRENGTH_MISSING", "strength recommended for concat_items")
            else:
                flag("product.strength", "E_REQUIRED_STRENGTH", "strength required")
        if _emptyish(row.form):
            flag("product.form", "E_REQUIRED_FORM", "form required")
    if not relaxed and _emptyish(row.category):
        flag("product.category", "E_REQUIRED_CATEGORY", "category required")

    # ---- 5. Expiry cross-check
    expiry_iso = parse_date_flexible(row.expiry_date)
    if not relaxed and not is_non_medicine and _emptyish(row.expiry_date):
        if policy.optional_dose_fields:
            flag("batch.expiry_date", "W_OPTIONAL_EXPIRY_MISSING", "expiry recommended for concat_items")
        else:
            flag("batch.expiry_date", "E_REQUIRED_EXPIRY", "expiry_date required")
    if expiry_iso:
        if not is_future_date(expiry_iso):
            flag("batch.expiry_date", "expired", "Expiry date must be in the future")
    elif row.expiry_date:
        flag("batch.expiry_date", "invalid_format", "Cannot parse expiry date")

    if not relaxed:
        if not row.pkg and _emptyish(row.pieces_per_unit):
            flag("pkg.pieces_per_unit", "E_REQUIRED_PACK_CONTENTS", "pack contents required")
        if _emptyish(row.coo):
            if policy.optional_dose_fields:
                flag("identity.coo", "W_OPTIONAL_COO_MISSING", "COO recommended for concat_items")
            else:
                flag("identity.coo", "E_REQUIRED_COO", "country of origin required")
        if row.on_hand is None:
            flag("batch.on_hand", "E_REQUIRED_QUANTITY", "quantity required")

    # ---- 6. Category membership
    if policy.product_type_aware and not _emptyish(row.category):
        category_lower = row.category.strip().lower()
        if is_non_medicine and category_lower not in NON_MEDICINE_CATEGORY_LABELS:
            flag("product.category", "E_CATEGORY_NON_MED_INVALID",
                 'category must be either "Accessories" or "Chemicals & Reagents"')
        elif is_medicine and category_lower not in _MEDICINE_LABELS_LOWER:
            message = "category must be one of the 23 medicine categories"
            suggestion = suggest_medicine_category(row.category)
            if suggestion:
                message += f' (did you mean "{suggestion}"?)'
            flag("product.category", "E_CATEGORY_MED_INVALID", message)

    canonical = _build_canonical(row, expiry_iso, product_type)

    # ---- 7. Sanity pass
    _sanity_pass(canonical, policy.numeric_category_ids, config, flag)

    # ---- 8. Umbrella category
    umbrella_from_code = map_category_code_to_umbrella(row.cat)
    product = canonical.product
    umbrella = umbrella_from_code or classify_umbrella_category(
        product.generic_name,
        product.brand_name,
        product.category,
        product.description,
    )
    if umbrella:
        product.umbrella_category = umbrella
        if umbrella_from_code:
            product.category = umbrella_label(umbrella) or product.category
    elif (row.category or row.cat) and not cell_text(product.category).strip():
        product.category = NA_SENTINEL

    # ---- 9. NA fallback
    _apply_na_fallback(canonical)
    return RowResult(row=canonical, errors=errors)


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _emptyish(value: object) -> bool:
    return cell_text(value).strip().lower() in EMPTYISH_VALUES


def _retag(issues: list[Issue], field_name: str) -> list[Issue]:
    return [replace(issue, field=field_name) for issue in issues]


def _infer_product_type(flat: CanonicalFlat) -> str:
    """
    Product type for a template row that left it blank.

    Medicine category label → medicine; non-medicine label → non-medicine
    (category normalized); known form or strength-shaped value → medicine;
    chemical or accessory keyword in the names → non-medicine with that
    category. Nothing conclusive leaves the type empty.
    """
    category = collapse_whitespace(flat.category).lower()
    form = collapse_whitespace(flat.form).lower()
    strength = collapse_whitespace(flat.strength)

    if category in _MEDICINE_LABELS_LOWER:
        return "medicine"
    if category in NON_MEDICINE_CATEGORY_LABELS:
        flat.category = NON_MEDICINE_CATEGORY_LABELS[category]
        return "non-medicine"
    if form in _KNOWN_FORMS:
        return "medicine"
    if strength and (
        _STRENGTH_SHAPE_RE.match(re.sub(r"\s+", "", strength)) or _STRENGTH_TOKEN_RE.search(strength)
    ):
        return "medicine"

    combined = " ".join(
        cell_text(v).lower() for v in (flat.generic_name, flat.brand_name, flat.description)
    )
    if any(keyword in combined for keyword in CHEMICAL_KEYWORDS):
        flat.category = CHEMICALS_LABEL
        return "non-medicine"
    if any(keyword in combined for keyword in ACCESSORY_KEYWORDS):
        flat.category = ACCESSORIES_LABEL
        return "non-medicine"
    return ""


def _build_canonical(row: SanitizedRow, expiry_iso: str | None, product_type: str) -> CanonicalProduct:
    canonical = CanonicalProduct(
        product=ProductInfo(
            generic_name=row.generic_name or "",
            brand_name=row.brand_name,
            manufacturer_name=row.manufacturer_name,
            strength=row.strength or "",
            form=row.form or "",
            category=row.category,
            requires_prescription=row.requires_prescription,
            is_controlled=row.is_controlled,
            storage_conditions=row.storage_conditions,
            description=row.description,
        ),
        batch=BatchInfo(
            batch_no=row.batch_no or "",
            expiry_date=expiry_iso or "",
            on_hand=row.on_hand if row.on_hand is not None else 0,
            unit_price=row.unit_price,
            coo=row.coo,
        ),
    )
    if row.cat or row.frm or row.pkg or row.coo or row.sku or product_type:
        canonical.identity = IdentityInfo(
            cat=row.cat,
            frm=row.frm,
            pkg=row.pkg,
            coo=row.coo,
            sku=row.sku,
            purchase_unit=row.purchase_unit,
            unit=row.unit,
            product_type=product_type or None,
        )
    pieces = _finite_number(row.pieces_per_unit)
    if pieces is not None:
        canonical.pkg = PackageInfo(pieces_per_unit=pieces)
    return canonical


def _finite_number(value: str | None) -> float | None:
    text = cell_text(value).replace(",", "").strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def _sanity_pass(canonical: CanonicalProduct, numeric_category_ids: bool, config: EngineConfig, flag) -> None:
    """
    Demote values that break cross-field invariants into the description.

    The checks run in a fixed order; a value cleared by an earlier check
    is not reported again by a later one.
    """
    product = canonical.product
    batch = canonical.batch

    def demote(path: str, value: str) -> None:
        product.description = f"{product.description} {value}".strip() if product.description else value
        flag(path, "E_FIELD_SUSPECT_VALUE", SUSPECT_MESSAGE)

    # ---- 1. Form with digits or units
    if product.form and (has_digit(product.form) or has_unit_token(product.form)):
        moved, product.form = product.form, ""
        demote("product.form", moved)

    # ---- 2. Category with digits or units (POS integer ids pass)
    if product.category:
        category = product.category
        dirty = has_digit(category) or has_unit_token(category)
        if numeric_category_ids and _PURE_INT_RE.match(category):
            dirty = False
        if dirty:
            product.category = ""
            demote("product.category", category)

    # ---- 3. Generic name carrying strength or form tokens
    if product.generic_name:
        removed: list[str] = []

        def strip_token(match: re.Match) -> str:
            removed.append(match.group(0))
            return " "

        generic = _GENERIC_UNIT_RE.sub(strip_token, product.generic_name)
        generic = collapse_whitespace(_FORM_WORD_RE.sub(strip_token, generic))
        if removed and generic:
            product.generic_name = generic
            demote("product.generic_name", " ".join(removed))

    # ---- 4. Category duplicating the form
    if product.form and product.category:
        form = product.form.lower()
        if product.category.lower() in (form, f"{form}s"):
            moved, product.category = product.category, ""
            demote("product.category", moved)

    # ---- 5. Manufacturer that is a country, or carries dose/form words
    if product.manufacturer_name:
        manufacturer = product.manufacturer_name
        iso = normalize_country_to_iso2(manufacturer)
        if iso:
            product.manufacturer_name = ""
            batch.coo = iso
            demote("product.manufacturer_name", manufacturer)
        elif has_unit_token(manufacturer) or _FORM_WORD_RE.search(manufacturer):
            product.manufacturer_name = ""
            demote("product.manufacturer_name", manufacturer)

    # ---- 6. Country of origin holding a company name
    if batch.coo and len(batch.coo) > 2 and _COO_COMPANY_RE.search(batch.coo):
        moved, batch.coo = batch.coo, None
        demote("identity.coo", moved)

    # ---- 7. Batch shape
    if batch.batch_no:
        batch_no = batch.batch_no
        if not is_alphanumeric_batch(batch_no) or has_unit_token(batch_no) or STRENGTH_LIKE_RE.match(batch_no):
            batch.batch_no = ""
            demote("batch.batch_no", batch_no)

    # ---- 8. Manufacturer shape
    if product.manufacturer_name:
        manufacturer = product.manufacturer_name
        digits_invalid = has_digit(manufacturer) and not config.is_allowed_numeric_manufacturer(manufacturer)
        if (
            digits_invalid
            or has_unit_token(manufacturer)
            or STRENGTH_LIKE_RE.match(manufacturer)
            or punctuation_count(manufacturer) > MAX_PUNCTUATION_MARKS
        ):
            product.manufacturer_name = ""
            demote("product.manufacturer_name", manufacturer)

    # ---- 9. Country shape
    if batch.coo:
        coo = batch.coo
        if has_digit(coo) or has_unit_token(coo) or STRENGTH_LIKE_RE.match(coo):
            batch.coo = None
            demote("identity.coo", coo)

    # ---- 10. Brand conflicts and contamination
    if product.brand_name:
        brand = product.brand_name
        key = brand.strip().lower()
        duplicate = key in (
            cell_text(product.generic_name).strip().lower(),
            cell_text(product.manufacturer_name).strip().lower(),
        )
        digits_invalid = has_digit(brand) and not config.is_allowed_numeric_brand(brand)
        if (
            duplicate
            or has_unit_token(brand)
            or _FORM_WORD_RE.search(brand)
            or digits_invalid
            or len(brand) > BRAND_MAX_LENGTH
            or punctuation_count(brand) > MAX_PUNCTUATION_MARKS
        ):
            product.brand_name = None
            demote("product.brand_name", brand)
        elif _MANUFACTURER_HINT_RE.search(brand):
            product.brand_name = None
            if not product.manufacturer_name and not has_digit(brand):
                product.manufacturer_name = brand
                flag("product.manufacturer_name", "E_FIELD_SUSPECT_VALUE",
                     "brand looks like a manufacturer; moved to manufacturer")
            else:
                demote("product.brand_name", brand)


def _apply_na_fallback(canonical: CanonicalProduct) -> None:
    product = canonical.product
    for name in ("brand_name", "manufacturer_name", "form", "category", "storage_conditions"):
        if not cell_text(getattr(product, name)).strip():
            setattr(product, name, NA_SENTINEL)

    description = cell_text(product.description).strip()
    duplicated = _DUPLICATED_TEXT_RE.match(description)
    if duplicated:
        description = duplicated.group(1)
    product.description = description or NA_SENTINEL

    if not canonical.batch.batch_no.strip():
        canonical.batch.batch_no = NA_SENTINEL
