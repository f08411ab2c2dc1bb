"""
Import schema definitions for the product import engine.

Defines the closed set of source schemas, the official template header
layout, canonical field paths, required-field contracts, and the analysis
and validation modes accepted by the pipeline.
"""

# ---------------------------------------------------------------------------
# Engine identity
# ---------------------------------------------------------------------------
ENGINE_VERSION: str = "0.1.0"

# ---------------------------------------------------------------------------
# Source schemas
# ---------------------------------------------------------------------------
SCHEMA_TEMPLATE_V3: str = "template_v3"
SCHEMA_CONCAT_ITEMS: str = "concat_items"
SCHEMA_CSV_GENERIC: str = "csv_generic"
SCHEMA_UNKNOWN: str = "unknown"

SOURCE_SCHEMAS: set[str] = {
    SCHEMA_TEMPLATE_V3,
    SCHEMA_CONCAT_ITEMS,
    SCHEMA_CSV_GENERIC,
    SCHEMA_UNKNOWN,
}

# Older callers still pass the POS export under its previous name.
SCHEMA_ALIASES: dict[str, str] = {
    "legacy_items": SCHEMA_CONCAT_ITEMS,
}

# ---------------------------------------------------------------------------
# Official MedWay template (workbook with __meta sheet)
# ---------------------------------------------------------------------------
TEMPLATE_VERSION: str = "MedWay_Template_v3"

# FNV-1a 32-bit of the lowercased headers joined with "|"
TEMPLATE_CHECKSUM: str = "f9802bc8"

TEMPLATE_V3_HEADERS: list[str] = [
    "Generic (International Name)",
    "Product Type",
    "Strength",
    "Dosage Form",
    "Product Category",
    "Expiry Date",
    "Pack Contents",
    "Batch / Lot Number",
    "Item Quantity",
    "Unit Price",
    "Country of Manufacture",
    "Serial Number",
    "Brand Name",
    "Manufacturer",
    "Notes",
]

META_SHEET_NAME: str = "__meta"
PRODUCTS_SHEET_NAME: str = "products"

# ---------------------------------------------------------------------------
# Point-of-sale "Items" export (concatenated name/description blobs)
# ---------------------------------------------------------------------------
LEGACY_ITEMS_HEADERS: list[str] = [
    "Id",
    "Name",
    "Description",
    "Image",
    "CategoryId",
    "SubCategoryId",
    "UnitId",
    "Stock",
    "Price",
    "Discount",
    "DiscountType",
    "AvailableTimeStarts",
    "AvailableTimeEnds",
    "Variations",
    "ChoiceOptions",
    "AddOns",
    "Attributes",
    "StoreId",
    "ModuleId",
    "Status",
    "Veg",
    "Recommended",
]

# ---------------------------------------------------------------------------
# Analysis and validation modes
# ---------------------------------------------------------------------------
ANALYSIS_MODES: set[str] = {"fast", "deep"}
VALIDATION_MODES: set[str] = {"full", "errorsOnly", "none"}

FAST_SAMPLE_LIMIT: int = 32
DEEP_SAMPLE_MIN: int = 64
DEEP_SAMPLE_MAX: int = 256
DEEP_SAMPLE_FRACTION: float = 0.25

# ---------------------------------------------------------------------------
# Canonical field paths
# ---------------------------------------------------------------------------
# Flat field bag key → dotted path inside the canonical record.
FLAT_KEY_TO_PATH: dict[str, str] = {
    "generic_name": "product.generic_name",
    "brand_name": "product.brand_name",
    "manufacturer_name": "product.manufacturer_name",
    "strength": "product.strength",
    "form": "product.form",
    "category": "product.category",
    "requires_prescription": "product.requires_prescription",
    "is_controlled": "product.is_controlled",
    "storage_conditions": "product.storage_conditions",
    "description": "product.description",
    "expiry_date": "batch.expiry_date",
    "batch_no": "batch.batch_no",
    "on_hand": "batch.on_hand",
    "unit_price": "batch.unit_price",
    "coo": "identity.coo",
    "cat": "identity.cat",
    "frm": "identity.frm",
    "pkg": "identity.pkg",
    "sku": "identity.sku",
    "purchase_unit": "identity.purchase_unit",
    "unit": "identity.unit",
    "product_type": "identity.product_type",
    "pieces_per_unit": "pkg.pieces_per_unit",
}

# Dotted path → flat key. Country of origin is addressed from both groups.
PATH_TO_FLAT_KEY: dict[str, str] = {
    path: key for key, path in FLAT_KEY_TO_PATH.items()
}
PATH_TO_FLAT_KEY["batch.coo"] = "coo"

# Header-semantics keys that differ from the flat field bag.
CANONICAL_KEY_TO_FLAT: dict[str, str] = {
    "generic_name": "generic_name",
    "brand_name": "brand_name",
    "strength": "strength",
    "form": "form",
    "category": "category",
    "expiry_date": "expiry_date",
    "batch_no": "batch_no",
    "pack_contents": "pieces_per_unit",
    "on_hand": "on_hand",
    "unit_price": "unit_price",
    "coo": "coo",
    "sku": "sku",
    "manufacturer": "manufacturer_name",
    "notes": "description",
    "requires_prescription": "requires_prescription",
    "is_controlled": "is_controlled",
    "storage_conditions": "storage_conditions",
    "purchase_unit": "purchase_unit",
    "pieces_per_unit": "pieces_per_unit",
    "unit": "unit",
    "product_type": "product_type",
}

# Paths whose leftover text may be routed by column role.
TEXTUAL_TARGETS: set[str] = {
    "product.generic_name",
    "product.description",
    "product.brand_name",
    "product.manufacturer_name",
    "product.category",
}

# ---------------------------------------------------------------------------
# Required-field contracts (exposed in meta for preview UIs)
# ---------------------------------------------------------------------------
REQUIRED_FIELDS_FULL: list[str] = [
    "product.generic_name",
    "product.strength",
    "product.form",
    "product.category",
    "batch.expiry_date",
    "pkg.pieces_per_unit",
    "identity.coo",
    "batch.on_hand",
]

REQUIRED_FIELDS_CONCAT: list[str] = ["product.generic_name"]

# ---------------------------------------------------------------------------
# Product types (template v3)
# ---------------------------------------------------------------------------
PRODUCT_TYPES: set[str] = {"medicine", "non-medicine"}

NON_MEDICINE_CATEGORY_LABELS: dict[str, str] = {
    "accessories": "Accessories",
    "chemicals & reagents": "Chemicals & Reagents",
}

# Placeholder written into empty optional text fields after validation.
NA_SENTINEL: str = "NA"

# Values treated as "nothing entered" by the requiredness checks.
EMPTYISH_VALUES: set[str] = {"", "n/a", "na", "-", "none", "null"}
