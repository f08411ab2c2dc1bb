"""
Dosage form vocabularies and text-hygiene word lists.

Several tables exist because each stage sees form text in a different
shape: header-mapped cells (FORM_SYNONYMS), free-text sanitizing
(SANITIZER_FORM_SYNONYMS with fuzzy autocorrect), single uppercase tokens
inside concatenated cells (FORM_KEYWORDS), trailing suffixes of product
names (NAME_SUFFIX_FORMS) and tail phrases anchoring a whole cell
(FORM_PHRASE_DICTIONARY).
"""

# ---------------------------------------------------------------------------
# Canonical form enum (sanitized output)
# ---------------------------------------------------------------------------
FORM_ENUM: list[str] = [
    "tablet",
    "capsule",
    "syrup",
    "injection",
    "cream",
    "ointment",
    "drops",
    "inhaler",
    "suspension",
    "solution",
    "gel",
    "spray",
    "lotion",
    "patch",
    "powder",
    "other",
]

# Maximum edit distance accepted as a form autocorrect.
FORM_AUTOCORRECT_MAX_DISTANCE: int = 2

# ---------------------------------------------------------------------------
# Row-mapping form synonyms (lowercased cell → form)
# ---------------------------------------------------------------------------
FORM_SYNONYMS: dict[str, str] = {
    "tab": "tablet",
    "tablet": "tablet",
    "tabs": "tablet",
    "capsule": "capsule",
    "cap": "capsule",
    "caps": "capsule",
    "syrup": "syrup",
    "suspension": "suspension",
    "susp": "suspension",
    "injection": "injection",
    "inj": "injection",
    "ointment": "ointment",
    "cream": "cream",
    "gel": "gel",
    "drops": "drops",
    "drop": "drops",
    "inhaler": "inhaler",
    "lotion": "lotion",
    "patch": "patch",
    "suppository": "suppository",
    "powder": "powder",
    "solution": "solution",
    "sol": "solution",
    "granules": "granules",
    "granule": "granules",
    "spray": "spray",
    "ns": "spray",          # nasal spray
    "nebulizer solution": "nebulizer solution",
    "nebule": "nebulizer solution",
}

# Extra bare words recognised as a form when sniffing headerless columns.
HEADERLESS_FORM_WORDS: set[str] = {
    "tablet", "tab", "capsule", "cap", "syrup", "cream", "ointment",
    "inj", "injection", "solution",
}

# ---------------------------------------------------------------------------
# Sanitizer form synonyms (ASCII-folded lowercase → FORM_ENUM)
# ---------------------------------------------------------------------------
SANITIZER_FORM_SYNONYMS: dict[str, str] = {
    "tab": "tablet",
    "tablet": "tablet",
    "tablets": "tablet",
    "pill": "tablet",
    "pills": "tablet",
    "pillz": "tablet",
    "tabb": "tablet",
    "cap": "capsule",
    "capsule": "capsule",
    "capsules": "capsule",
    "capsul3": "capsule",
    "syr": "syrup",
    "syrup": "syrup",
    "sirup": "syrup",
    "syrp": "syrup",
    "liq": "syrup",
    "inj": "injection",
    "injection": "injection",
    "injectable": "injection",
    "crm": "cream",
    "cream": "cream",
    "ont": "ointment",
    "ointment": "ointment",
    "drop": "drops",
    "drops": "drops",
    "inh": "inhaler",
    "inhaler": "inhaler",
    "suspension": "suspension",
    "solution": "solution",
    "gel": "gel",
    "spray": "spray",
    "lotion": "lotion",
    "patch": "patch",
    "powder": "powder",
    "suppository": "other",
    "suppositories": "other",
    "topical medicines": "other",
    "other": "other",
}

# ---------------------------------------------------------------------------
# Concatenated-cell token keywords (uppercase token → form)
# ---------------------------------------------------------------------------
FORM_KEYWORDS: dict[str, str] = {
    "TAB": "tablet",
    "TABS": "tablet",
    "TABLET": "tablet",
    "TABLETS": "tablet",
    "CAP": "capsule",
    "CAPS": "capsule",
    "CAPSULE": "capsule",
    "CAPSULES": "capsule",
    "SYR": "syrup",
    "SYRUP": "syrup",
    "SUSP": "suspension",
    "SUSPENSION": "suspension",
    "INJ": "injection",
    "INJECTION": "injection",
    "OINT": "ointment",
    "OINTMENT": "ointment",
    "CRM": "cream",
    "CREAM": "cream",
    "GEL": "gel",
    "LOTION": "lotion",
    "DROP": "drops",
    "DROPS": "drops",
    "SOL": "solution",
    "SOLN": "solution",
    "SOLUTION": "solution",
    "PATCH": "patch",
    "POWD": "powder",
    "POWDER": "powder",
    "SPRAY": "spray",
}

# ---------------------------------------------------------------------------
# Product-name suffix forms ("...-TABLET", "... EYE DROPS")
# ---------------------------------------------------------------------------
NAME_SUFFIX_FORMS: dict[str, str] = {
    "TABLET": "tablet",
    "FILM COATED TABLET": "tablet",
    "FILM-COATED TABLET": "tablet",
    "CHEWABLE TABLET": "tablet",
    "SUPPOSITORY": "other",
    "SUPPOSITORIES": "other",
    "CAPSULE": "capsule",
    "CAPSULES": "capsule",
    "PESSARY": "other",
    "PESSARIES": "other",
    "SYRUP": "syrup",
    "ELIXIR": "syrup",
    "SUSPENSION": "suspension",
    "POWDER FOR SUSPENSION": "suspension",
    "SUSPENSION FOR INHALATION": "inhaler",
    "CREAM": "cream",
    "OINTMENT": "ointment",
    "GEL": "gel",
    "LOTION": "lotion",
    "SOLUTION": "solution",
    "MOUTH WASH": "solution",
    "EYE DROP": "drops",
    "EYE DROPS": "drops",
    "DROPS": "drops",
    "DROP": "drops",
    "AEROSOL": "inhaler",
    "SPRAY": "spray",
    "SHAMPOO": "other",
    "POWDER FOR INHALATION": "inhaler",
    "EFFERVESCENT TABLETS": "tablet",
    "PATCH": "patch",
}

# ---------------------------------------------------------------------------
# Tail-phrase dictionary (form → variants, checked in this order)
# ---------------------------------------------------------------------------
# "other" phrases only anchor when the cell also carries a dose signal, so
# device and test-kit names are not read as dosage forms.
FORM_PHRASE_DICTIONARY: dict[str, list[str]] = {
    "tablet": [
        "tablet", "tablets", "tab", "tabs", "tab.", "-tablet", "-tablets",
        "effervescent tablets", "film coated tablet", "film-coated tablet",
        "chewable tablet",
    ],
    "capsule": ["capsule", "capsules", "cap", "caps", "cap.", "-capsule"],
    "syrup": ["syrup", "sirup"],
    "suspension": ["suspension", "susp", "susp.", "powder for suspension"],
    "cream": ["cream", "creme", "cr.", "–cream", "-cream"],
    "gel": ["gel", "-gel"],
    "ointment": ["ointment", "oint.", "oint", "-ointment"],
    "drops": ["drop", "drops", "eye drop", "eye drops", "ear drop", "ear drops"],
    "injection": ["injection", "inj.", "inj", "-injection"],
    "inhaler": ["aerosol", "suspension for inhalation", "inhalation", "puffer"],
    "other": [
        "shampoo", "plaster", "adhesive plaster", "sachet", "sachets",
        "sacchet", "suppository", "suppositories", "pregnancy test", "test",
    ],
}

# ---------------------------------------------------------------------------
# Manufacturer hints
# ---------------------------------------------------------------------------
# Uppercase substrings marking a text segment as a company name.
MANUFACTURER_HINTS: list[str] = [
    "PHARMA", "PHARMACEUTICAL", "PHARMACEUTICALS", "LABS", "LABORATORIES",
    "INDUSTRIES", "INDUSTRY", "MANUFACTURING", "MANUFACTURER", "HEALTHCARE",
    "BIOTECH", "MED", "MEDICA", "MEDICINES", "DRUG", "PLC", "LTD", "LIMITED",
    "INC", "GMBH", "S.A.", "S.P.A.", "AG",
]

# Phrases introducing a manufacturer; the earliest occurrence wins.
MANUFACTURER_MARKERS: list[str] = [
    "MFG BY",
    "MFD BY",
    "MANUFACTURED BY",
    "MARKETED BY",
]

# Whole-word manufacturer hints used when promoting a brand to manufacturer.
MANUFACTURER_HINT_WORDS: list[str] = [
    r"pharma", r"pharmaceuticals?", r"labs?", r"laboratories", r"industries",
    r"industry", r"manufacturing", r"manufacturer", r"healthcare", r"biotech",
    r"med", r"medica", r"medicines", r"drug", r"plc", r"ltd", r"limited",
    r"inc", r"gmbh", r"s\.a\.", r"s\.p\.a\.", r"ag",
]

# Looser company words that disqualify a country-of-origin value.
COO_COMPANY_WORDS: list[str] = [
    "pharm", "pharma", "pharmaceuticals", "labs?", "ltd", "industries",
    "bio", "med", "health",
]

# ---------------------------------------------------------------------------
# Batch labels and purchase units
# ---------------------------------------------------------------------------
BATCH_LABEL_TOKENS: list[str] = [
    "LOT", "LOTNO", "LOTNO.", "BNO", "B.NO", "B-NO", "B/NO", "BATCHNO", "BATCH NO",
]

PURCHASE_UNITS: set[str] = {"box", "bottle", "strip", "vial", "ampoule", "device"}

BOOLEAN_TRUE_TOKENS: set[str] = {"true", "yes", "1", "y", "rx"}
BOOLEAN_FALSE_TOKENS: set[str] = {"false", "no", "0", "n", "otc"}

# ---------------------------------------------------------------------------
# Field limits
# ---------------------------------------------------------------------------
BATCH_MAX_LENGTH: int = 20
BRAND_MAX_LENGTH: int = 40
MAX_PUNCTUATION_MARKS: int = 3
