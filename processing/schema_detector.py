"""
Source-schema detection.

Classifies a whole file into one of the closed set of source schemas,
first hit wins:
  1. __meta sheet carries the template version and checksum → template_v3
  2. synthetic col_N headers → unknown (workbook) / csv_generic (text)
  3. header set equals the POS "Items" export headers        → concat_items
  4. recomputed header checksum equals the template checksum → template_v3
  5. a header mentions generic/name/batch/expiry/price       → csv_generic
  6. otherwise                                               → unknown

Public API:
    fnv1a32(text) → str
    headers_checksum(headers) → str
    detect_source_schema(rows, template_meta=None, origin="workbook") → str
    looks_like_generic_csv(headers) → bool
    resolve_schema(name) → str
"""

import logging
import re

from config.header_synonyms import PRODUCT_CSV_HEADER_TOKENS
from config.schema import (
    LEGACY_ITEMS_HEADERS,
    SCHEMA_ALIASES,
    SCHEMA_CONCAT_ITEMS,
    SCHEMA_CSV_GENERIC,
    SCHEMA_TEMPLATE_V3,
    SCHEMA_UNKNOWN,
    SOURCE_SCHEMAS,
    TEMPLATE_CHECKSUM,
    TEMPLATE_VERSION,
)

logger = logging.getLogger(__name__)

_SYNTHETIC_KEY_RE = re.compile(r"^col_\d+$")

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 16777619.0


def fnv1a32(text: str) -> str:
    """
    FNV-1a digest of *text* over UTF-16 code units, as 8 lowercase hex digits.

    The multiply is carried out in double precision and only the XOR step
    wraps to 32 bits, so digests match those written into existing
    template workbooks.
    """
    data = str(text).encode("utf-16-le")
    h: float | int = _FNV_OFFSET_BASIS
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = (int(h) % 2**32) ^ code
        h = float(h) * _FNV_PRIME
    return f"{int(h) % 2**32:08x}"


def headers_checksum(headers: list[str]) -> str:
    """Checksum of the headers joined with "|", lowercased."""
    return fnv1a32("|".join(str(h) for h in headers).lower())


def is_synthetic_header_set(keys: list[str]) -> bool:
    """True when every key is a generated col_N label."""
    return bool(keys) and all(_SYNTHETIC_KEY_RE.match(k) for k in keys)


def looks_like_generic_csv(headers: list[str]) -> bool:
    lower = [str(h).lower() for h in headers]
    return any(token in h for token in PRODUCT_CSV_HEADER_TOKENS for h in lower)


def detect_source_schema(
    rows: list[dict],
    template_meta: dict | None = None,
    origin: str = "workbook",
) -> str:
    """
    Classify the file from its header keys and optional template metadata.

    Args:
        rows: All raw rows; only the keys of the first row are inspected.
        template_meta: {"template_version", "header_checksum"} from the
            workbook's __meta sheet, if any.
        origin: "workbook" or "text". Headerless text files still get
            fuzzy generic-CSV mapping.

    Returns:
        One of template_v3, concat_items, csv_generic, unknown.
    """
    meta = template_meta or {}
    if (
        meta.get("template_version") == TEMPLATE_VERSION
        and meta.get("header_checksum") == TEMPLATE_CHECKSUM
    ):
        return SCHEMA_TEMPLATE_V3

    keys = [str(k) for k in (rows[0].keys() if rows else [])]
    if is_synthetic_header_set(keys):
        return SCHEMA_UNKNOWN if origin == "workbook" else SCHEMA_CSV_GENERIC

    if sorted(keys) == sorted(LEGACY_ITEMS_HEADERS):
        return SCHEMA_CONCAT_ITEMS

    if keys and headers_checksum(keys) == TEMPLATE_CHECKSUM:
        return SCHEMA_TEMPLATE_V3

    if looks_like_generic_csv(keys):
        return SCHEMA_CSV_GENERIC

    logger.debug(f"No schema matched headers {keys}")
    return SCHEMA_UNKNOWN


def resolve_schema(name: str) -> str:
    """Canonical schema name, following legacy aliases ("legacy_items")."""
    resolved = SCHEMA_ALIASES.get(name, name)
    if resolved not in SOURCE_SCHEMAS:
        raise ValueError(f"Unknown source schema: {name!r}")
    return resolved
