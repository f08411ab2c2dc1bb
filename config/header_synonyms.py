"""
Header vocabulary used to recognise columns by their labels.

Three tables live here:
  - HEADER_SYNONYMS: normalized header key → flat field, used for exact and
    fuzzy header lookup on generic CSVs.
  - HEADER_SEMANTIC_DEFS: canonical key definitions with value types,
    synonym phrases and negative tokens, used by the confidence scorer.
  - HEADER_LEXICON_TOKENS: substrings that make a first-row cell look like a
    column label rather than data.
"""

# ---------------------------------------------------------------------------
# Normalized header key → flat field (exact match after normalization)
# ---------------------------------------------------------------------------
# Order matters: the first field listing a synonym wins ("product_name" is
# claimed by brand_name before generic_name).
HEADER_SYNONYMS: dict[str, list[str]] = {
    "brand_name": [
        "brand",
        "brand_name",
        "trade_name",
        "commercial_name",
        "product_name",
    ],
    "manufacturer_name": [
        "manufacturer",
        "manufacturer_name",
        "mfr",
        "company",
        "supplier",
        "producer",
    ],
    "generic_name": [
        "generic",
        "generic_name",
        "generic_international_name",
        "name",
        "drug_name",
        "product_name",
    ],
    "strength": ["strength", "dosage", "mg", "concentration", "dose"],
    "form": ["form", "dosage_form", "product_form", "type", "dose_form"],
    "category": [
        "category",
        "product_category",
        "category_name",
        "group",
        "product_group",
    ],
    "expiry_date": ["expiry_date", "expiry", "exp_date", "expiration", "expires"],
    "batch_no": [
        "batch_no",
        "batch",
        "batch_number",
        "lot",
        "lot_no",
        "batch_lot_number",
        "batch_lot",
        "lot_number",
    ],
    "on_hand": [
        "on_hand",
        "qty",
        "quantity",
        "quantity_in_stock",
        "stock",
        "item_quantity",
    ],
    "unit_price": ["unit_price", "price", "selling_price", "unitprice", "cost"],
    "coo": [
        "coo",
        "country",
        "country_of_manufacture",
        "manufacturing_country",
        "made_in",
        "country_code",
    ],
    "cat": ["cat", "category_code"],
    "frm": ["frm", "form_code"],
    "pkg": ["pkg", "package", "package_code"],
    "sku": ["sku", "item_code"],
    "requires_prescription": [
        "requires_prescription",
        "prescription",
        "rx",
        "needs_prescription",
    ],
    "is_controlled": ["is_controlled", "controlled", "controlled_substance", "cs"],
    "storage_conditions": ["storage_conditions", "storage", "store", "handling"],
    "description": ["description", "notes", "remarks"],
    "purchase_unit": ["purchase_unit", "pack", "box", "carton"],
    "pieces_per_unit": ["pieces_per_unit", "pieces", "units_per_pack", "units_per_box"],
    "unit": ["unit", "uom", "unit_of_measure"],
    "product_type": ["product_type"],
}

# Minimum similarity for a fuzzy header match to be accepted.
FUZZY_HEADER_THRESHOLD: float = 0.8

# ---------------------------------------------------------------------------
# Semantic definitions for header confidence scoring
# ---------------------------------------------------------------------------
# type: "text" | "number" | "date". Number and date fields lose confidence
# when the sampled values do not look like numbers or dates.
HEADER_SEMANTIC_DEFS: list[dict] = [
    {
        "key": "generic_name",
        "type": "text",
        "synonyms": [
            "generic", "generic name", "international name", "inn",
            "active ingredient", "api name", "drug name", "product name",
            "generic international name",
        ],
        "negative": ["brand"],
    },
    {
        "key": "brand_name",
        "type": "text",
        "synonyms": ["brand", "brand name", "trade name", "commercial name"],
        "negative": ["generic"],
    },
    {
        "key": "strength",
        "type": "text",
        "synonyms": ["strength", "dose", "dosage", "concentration", "potency"],
    },
    {
        "key": "form",
        "type": "text",
        "synonyms": [
            "dosage form", "form", "formulation", "presentation",
            "product form", "type",
        ],
    },
    {
        "key": "category",
        "type": "text",
        "synonyms": [
            "category", "product category", "therapeutic class", "class",
            "group",
        ],
    },
    {
        "key": "expiry_date",
        "type": "date",
        "synonyms": [
            "expiry", "expiry date", "exp date", "expiration", "use by",
            "best before",
        ],
    },
    {
        "key": "batch_no",
        "type": "text",
        "synonyms": [
            "batch", "batch no", "batch number", "lot", "lot no",
            "lot number", "batch/lot", "batch lot number",
        ],
    },
    {
        "key": "pack_contents",
        "type": "text",
        "synonyms": [
            "pack contents", "pack size", "pack", "units per pack",
            "tablets per strip", "volume per bottle",
        ],
    },
    {
        "key": "on_hand",
        "type": "number",
        "synonyms": [
            "quantity", "qty", "stock", "on hand", "available",
            "item quantity", "count",
        ],
    },
    {
        "key": "unit_price",
        "type": "number",
        "synonyms": [
            "unit price", "price", "cost", "buy price", "purchase price",
            "selling price", "sale price",
        ],
    },
    {
        "key": "coo",
        "type": "text",
        "synonyms": [
            "country of manufacture", "country of origin", "origin", "coo",
            "made in", "manufacturing country", "country",
        ],
    },
    {
        "key": "sku",
        "type": "text",
        "synonyms": [
            "serial number", "serial", "s/n", "code", "barcode", "gtin",
            "ean", "product code", "uid", "serial no",
        ],
    },
    {
        "key": "manufacturer",
        "type": "text",
        "synonyms": [
            "manufacturer", "mfr", "company", "company name", "supplier",
            "producer",
        ],
    },
    {
        "key": "notes",
        "type": "text",
        "synonyms": ["notes", "comments", "remarks", "description", "details"],
    },
    {
        "key": "requires_prescription",
        "type": "text",
        "synonyms": [
            "requires prescription", "prescription", "rx",
            "needs prescription",
        ],
    },
    {
        "key": "is_controlled",
        "type": "text",
        "synonyms": ["controlled", "is controlled", "controlled substance", "cs"],
    },
    {
        "key": "storage_conditions",
        "type": "text",
        "synonyms": ["storage conditions", "storage", "store", "keep", "handling"],
    },
    {
        "key": "purchase_unit",
        "type": "text",
        "synonyms": ["purchase unit", "buy unit", "pack", "box", "carton"],
    },
    {
        "key": "pieces_per_unit",
        "type": "number",
        "synonyms": ["pieces per unit", "pieces", "units per pack", "units per box"],
    },
    {
        "key": "unit",
        "type": "text",
        "synonyms": ["unit", "measure", "uom", "unit of measure"],
    },
    {
        "key": "reserved",
        "type": "number",
        "synonyms": ["reserved", "hold", "on reserve"],
    },
    {
        "key": "product_type",
        "type": "text",
        "synonyms": ["product type", "product_type"],
    },
]

# Token weights for partial header matches
STRONG_HEADER_TOKENS: set[str] = {
    "batch", "lot", "expiry", "expiration", "country", "price",
    "quantity", "qty", "stock", "form", "strength",
}
SECONDARY_HEADER_TOKENS: set[str] = {"number", "date", "name", "code"}

STRONG_TOKEN_WEIGHT: float = 0.3
SECONDARY_TOKEN_WEIGHT: float = 0.1
OTHER_TOKEN_WEIGHT: float = 0.05
TYPE_MISMATCH_PENALTY: float = 0.5

# Share of sampled values that must look numeric / date-shaped.
TYPE_COMPATIBLE_RATIO: float = 0.6
HEADER_SAMPLE_ROWS: int = 20

# Confidence needed before a header counts as mapped.
HEADER_MAPPING_THRESHOLD: float = 0.6
HEADER_TRUST_THRESHOLD: float = 0.8
HEADER_REMAINDER_THRESHOLD: float = 0.65

# ---------------------------------------------------------------------------
# First-row header lexicon (header mode detection)
# ---------------------------------------------------------------------------
HEADER_LEXICON_TOKENS: list[str] = [
    "generic", "name", "brand", "strength", "dosage", "form", "category",
    "batch", "lot", "expiry", "exp_date", "unit price", "price", "on_hand",
    "quantity", "qty", "country", "coo", "serial", "sku",
]

# Substrings that make a header set look like a product listing.
PRODUCT_CSV_HEADER_TOKENS: list[str] = ["generic", "name", "batch", "expiry", "price"]
