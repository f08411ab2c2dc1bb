"""
End-to-end product import pipeline.

    read file → header mode → schema → per-column analysis
    (headerless assignment, concatenated columns, column hygiene,
    concat mode) → per row: map → concatenation overlay → canonicalize

The analysis mode only sets the reported sample size and how many rows
feed the headerless column-guess diagnostics; rows are identical in both
modes.

Concatenation overlay (per row, before canonicalization):
  - name_only / full: the raw "Name" cell is split into generic name,
    strength and form
  - full: flagged concatenated columns that are also dirty are decomposed,
    their leftover text routed by the column's role; dirty description
    columns are split; generic / brand / description values are tried
    opportunistically
  - always: batch-number columns are decomposed and a B### token inside
    the mapped batch number replaces it

Public API:
    parse_products_file(path_or_buffer, filename=None, *, mode, validation_mode, config) → ParsedImportResult
    parse_products_core(rows, template_meta=None, *, mode, validation_mode, origin, config) → ParsedImportResult
    apply_extraction(flat, field_path, value, source_value=None) → bool
    assign_leftover_text(flat, target_path, text, source_value=None) → None
    compute_sample_size(total, mode) → int
"""

import logging
import math
import re
from dataclasses import asdict, dataclass, field

from config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from config.header_synonyms import HEADER_REMAINDER_THRESHOLD
from config.schema import (
    ANALYSIS_MODES,
    CANONICAL_KEY_TO_FLAT,
    DEEP_SAMPLE_FRACTION,
    DEEP_SAMPLE_MAX,
    DEEP_SAMPLE_MIN,
    ENGINE_VERSION,
    FAST_SAMPLE_LIMIT,
    FLAT_KEY_TO_PATH,
    PATH_TO_FLAT_KEY,
    TEXTUAL_TARGETS,
    VALIDATION_MODES,
)
from processing.canonicalizer import (
    CanonicalProduct,
    ParsedRowError,
    sanitize_canonical_row,
)
from processing.concat_decomposer import (
    decompose_concatenated_cell,
    split_name_generic_strength_form,
)
from processing.concat_detector import (
    ConcatColumn,
    classify_column_hygiene,
    infer_concatenated_columns,
)
from processing.file_reader import read_products_file
from processing.header_detector import build_raw_rows, detect_header_mode
from processing.header_semantics import suggest_header_mappings
from processing.headerless_inference import (
    infer_headerless_assignments,
    infer_headerless_guesses,
)
from processing.row_mapper import CanonicalFlat, get_schema_policy, map_raw_row
from processing.schema_detector import detect_source_schema, is_synthetic_header_set
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

REMAINDER_HINT_ROWS: int = 25

_LOT_LABEL_RE = re.compile(r"\b(LOT|EXP)\b|[/:]", re.IGNORECASE)
_BATCH_TOKEN_RE = re.compile(r"\bB[0-9A-Z]{3,}\b", re.IGNORECASE)
_NAME_REMNANT_RE = re.compile(r"-\s*\d+")


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ImportMeta:
    """Detection and processing metadata for one import."""

    source_schema: str = ""
    header_mode: str = "headers"            # "headers" | "none"
    required_fields: list[str] = field(default_factory=list)
    analysis_mode: str = "fast"
    sample_size: int = 0
    concat_mode: str = "none"               # "none" | "name_only" | "full"
    validation_mode: str = "full"
    concatenated_columns: list[ConcatColumn] = field(default_factory=list)
    dirty_columns: list[dict] = field(default_factory=list)
    decomposed_columns: list[dict] = field(default_factory=list)
    column_guesses: list[dict] | None = None
    template_version: str | None = None
    header_checksum: str | None = None
    total_rows: int = 0
    parsed_rows: int = 0
    engine_version: str = ENGINE_VERSION
    read_errors: list[str] = field(default_factory=list)


@dataclass
class ParsedImportResult:
    rows: list[CanonicalProduct] = field(default_factory=list)
    errors: list[ParsedRowError] = field(default_factory=list)
    meta: ImportMeta = field(default_factory=ImportMeta)

    def to_dict(self) -> dict:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "errors": [asdict(error) for error in self.errors],
            "meta": asdict(self.meta),
        }


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def parse_products_file(
    path_or_buffer,
    filename: str | None = None,
    *,
    mode: str = "fast",
    validation_mode: str = "full",
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ParsedImportResult:
    """
    Read and parse a products workbook or delimited text file.

    Both interpretations of row 1 are parsed: as a header row and as data.
    The headerless one is kept when the header-mode detector says "none",
    or when the header interpretation parsed nothing and the headerless
    one parsed more.

    Args:
        path_or_buffer: Path, bytes or binary file-like object.
        filename: Original file name (container type comes from it).
        mode: "fast" or "deep"; sets meta.sample_size and the column-guess window.
        validation_mode: "full", "errorsOnly" or "none".
        config: Engine allow-lists.

    Returns:
        ParsedImportResult. Container problems land in meta.read_errors.
    """
    _check_modes(mode, validation_mode)
    read = read_products_file(path_or_buffer, filename)
    if not read.matrix:
        logger.warning(f"No rows read from '{filename}'")
        return ParsedImportResult(
            meta=ImportMeta(
                analysis_mode=mode,
                validation_mode=validation_mode,
                read_errors=list(read.errors),
            )
        )

    header_mode = detect_header_mode(read.matrix)
    rows_headers = build_raw_rows(read.matrix, "headers")
    rows_none = build_raw_rows(read.matrix, "none")
    options = dict(mode=mode, validation_mode=validation_mode, origin=read.origin, config=config)

    with_headers = parse_products_core(rows_headers, read.template_meta, **options)
    headerless = parse_products_core(rows_none, first_row_number=1, **options)
    pick_none = header_mode == "none" or (
        with_headers.meta.parsed_rows == 0
        and headerless.meta.parsed_rows > with_headers.meta.parsed_rows
    )

    result = headerless if pick_none else with_headers
    result.meta.header_mode = "none" if pick_none else header_mode
    if pick_none:
        result.meta.column_guesses = [
            {
                "index": guess.index,
                "candidates": [
                    {"field": FLAT_KEY_TO_PATH.get(name, name), "confidence": score}
                    for name, score in guess.candidates
                ],
                "sample_values": guess.sample,
            }
            for guess in infer_headerless_guesses(rows_none[: result.meta.sample_size])
        ]
    result.meta.read_errors = list(read.errors)

    logger.info(
        f"Parsed '{filename}': schema={result.meta.source_schema}, "
        f"header_mode={result.meta.header_mode}, concat_mode={result.meta.concat_mode}, "
        f"{result.meta.parsed_rows}/{result.meta.total_rows} rows, {len(result.errors)} errors"
    )
    return result


def parse_products_core(
    rows: list[dict],
    template_meta: dict | None = None,
    *,
    mode: str = "fast",
    validation_mode: str = "full",
    origin: str = "workbook",
    first_row_number: int = 2,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ParsedImportResult:
    """
    Parse already-decoded raw rows into canonical products.

    Args:
        rows: Header (or col_N) keyed raw rows.
        template_meta: {"template_version", "header_checksum"} from the
            workbook's __meta sheet, if any.
        mode: "fast" (≤ 32 rows reported as the sample) or "deep" (64–256,
            or 25%). Does not change the returned rows.
        validation_mode: "full", "errorsOnly" or "none".
        origin: "workbook" or "text".
        first_row_number: Sheet row number of rows[0], used in errors.
        config: Engine allow-lists.

    Returns:
        ParsedImportResult with rows, errors and meta.

    Raises:
        ValueError: unknown analysis or validation mode.
    """
    _check_modes(mode, validation_mode)
    meta = ImportMeta(
        analysis_mode=mode,
        validation_mode=validation_mode,
        total_rows=len(rows),
        template_version=(template_meta or {}).get("template_version"),
        header_checksum=(template_meta or {}).get("header_checksum"),
    )
    result = ParsedImportResult(meta=meta)
    if not rows:
        return result

    # ---- 1. Column analysis
    # Everything that changes rows looks at the whole file (each analysis
    # applies its own fixed window), so fast and deep give the same rows.
    meta.sample_size = compute_sample_size(len(rows), mode)
    keys = list(rows[0].keys())

    meta.source_schema = detect_source_schema(rows, template_meta, origin)
    meta.required_fields = list(get_schema_policy(meta.source_schema).required_fields)
    headerless = is_synthetic_header_set(keys)
    meta.header_mode = "none" if headerless else "headers"
    assignments = infer_headerless_assignments(rows) if headerless else None

    meta.concatenated_columns = infer_concatenated_columns(rows)
    dirty = classify_column_hygiene(rows)
    meta.dirty_columns = [
        {"index": idx, "header": key} for idx, key in enumerate(keys) if dirty.get(key)
    ]
    meta.concat_mode = _detect_concat_mode(rows, keys, meta.concatenated_columns, config)
    remainder_paths = _column_remainder_paths(rows, keys, assignments)
    logger.info(
        f"Schema {meta.source_schema}, concat mode {meta.concat_mode}, "
        f"sample {meta.sample_size} of {len(rows)} rows"
    )

    # ---- 2. Per-row mapping, overlay and canonicalization
    decomposed: set[int] = set()
    for offset, raw in enumerate(rows):
        flat = map_raw_row(raw, meta.source_schema, assignments)
        if flat is None:
            continue

        if meta.concat_mode in ("name_only", "full"):
            _apply_name_split(flat, raw)
        if meta.concat_mode == "full":
            _apply_concat_overlay(
                flat, raw, keys, meta.concatenated_columns, dirty, remainder_paths, decomposed, config
            )
        _apply_batch_fallback(flat, raw, keys, remainder_paths, decomposed, config)

        row_result = sanitize_canonical_row(
            flat, offset + first_row_number, meta.source_schema, validation_mode, config
        )
        result.rows.append(row_result.row)
        result.errors.extend(row_result.errors)

    meta.parsed_rows = len(result.rows)
    meta.decomposed_columns = [
        {"index": idx, "header": keys[idx]} for idx in sorted(decomposed)
    ]
    return result


def compute_sample_size(total: int, mode: str) -> int:
    """Rows used for column analysis: fast ≤ 32, deep 64–256 or 25%."""
    if mode == "fast":
        return min(FAST_SAMPLE_LIMIT, total)
    by_fraction = math.ceil(total * DEEP_SAMPLE_FRACTION)
    return min(DEEP_SAMPLE_MAX, max(DEEP_SAMPLE_MIN, by_fraction))


def apply_extraction(
    flat: CanonicalFlat,
    field_path: str,
    value: object,
    source_value: str | None = None,
) -> bool:
    """
    Write *value* into the flat field addressed by *field_path* if that
    field is still free.

    A field is free when it is None or blank, when it still holds the raw
    source cell the value was extracted from, or (batch number only) when
    it carries a LOT/EXP label or a "/" or ":" separator.

    Returns:
        True when the value was written.
    """
    key = PATH_TO_FLAT_KEY.get(field_path)
    if key is None:
        return False
    existing = flat.get(key)
    if existing is not None:
        if not isinstance(existing, str):
            return False
        is_source = bool(source_value) and existing.strip() == str(source_value).strip()
        is_labelled_batch = field_path == "batch.batch_no" and bool(_LOT_LABEL_RE.search(existing))
        if existing.strip() and not is_source and not is_labelled_batch:
            return False
    flat.set(key, value)
    return True


def assign_leftover_text(
    flat: CanonicalFlat,
    target_path: str | None,
    text: str,
    source_value: str | None = None,
) -> None:
    """
    Route decomposition leftover text by the source column's role.

    Description text is appended; brand, manufacturer and category are
    only filled when empty (or still holding the raw source cell). Any
    target also fills an empty generic name. Untyped columns go to the
    generic name when it is free, else to the description.
    """
    text = cell_text(text).strip()
    if not text:
        return

    if target_path not in TEXTUAL_TARGETS or target_path == "product.generic_name":
        current = cell_text(flat.generic_name)
        if not current.strip() or _holds_source(current, source_value):
            flat.generic_name = text
        else:
            flat.description = _append_text(flat.description, text)
        return

    key = PATH_TO_FLAT_KEY[target_path]
    current = cell_text(flat.get(key))
    if key == "description":
        if _holds_source(current, source_value) or not current.strip():
            flat.description = text
        else:
            flat.description = f"{current} {text}"
    elif not current.strip() or _holds_source(current, source_value):
        flat.set(key, text)

    if not cell_text(flat.generic_name).strip():
        flat.generic_name = text


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _check_modes(mode: str, validation_mode: str) -> None:
    if mode not in ANALYSIS_MODES:
        raise ValueError(f"Unknown analysis mode: {mode!r}")
    if validation_mode not in VALIDATION_MODES:
        raise ValueError(f"Unknown validation mode: {validation_mode!r}")


def _holds_source(current: str, source_value: str | None) -> bool:
    return bool(source_value) and bool(current) and current.strip() == str(source_value).strip()


def _append_text(existing: object, text: str) -> str:
    base = cell_text(existing).strip()
    return f"{base} {text}" if base else text


def _detect_concat_mode(
    rows: list[dict],
    keys: list[str],
    concat_columns: list[ConcatColumn],
    config: EngineConfig,
) -> str:
    if concat_columns:
        return "full"

    def has_dose(value: object) -> bool:
        text = cell_text(value)
        if not text.strip():
            return False
        return decompose_concatenated_cell(text, config=config).has("product.strength")

    name_key = next((k for k in keys if k.lower() == "name"), None)
    if name_key and any(has_dose(row.get(name_key)) for row in rows):
        return "name_only"
    if any(has_dose(row.get(key)) for key in keys for row in rows):
        return "name_only"
    return "none"


def _column_remainder_paths(
    rows: list[dict],
    keys: list[str],
    assignments: dict[str, str] | None,
) -> dict[str, str | None]:
    """Canonical path each column's leftover text belongs to, if any."""
    hints = {
        hint.header: hint
        for hint in suggest_header_mappings(rows[:REMAINDER_HINT_ROWS], keys)
    }
    paths: dict[str, str | None] = {}
    for key in keys:
        path = None
        if assignments and assignments.get(key):
            path = FLAT_KEY_TO_PATH.get(assignments[key])
        else:
            hint = hints.get(key)
            if hint and hint.key and hint.confidence >= HEADER_REMAINDER_THRESHOLD:
                path = FLAT_KEY_TO_PATH.get(CANONICAL_KEY_TO_FLAT.get(hint.key, ""))
        if not path:
            lower = key.lower()
            if "batch" in lower or "lot" in lower:
                path = "batch.batch_no"
            elif "description" in lower or "notes" in lower:
                path = "product.description"
        paths[key] = path
    return paths


def _apply_name_split(flat: CanonicalFlat, raw: dict) -> None:
    name_raw = cell_text(raw.get("Name")).strip()
    if not name_raw:
        return
    parts = split_name_generic_strength_form(name_raw)
    if parts.generic_name:
        current = cell_text(flat.generic_name).strip()
        if not current or current == name_raw or _NAME_REMNANT_RE.search(current):
            flat.generic_name = parts.generic_name
    if parts.strength:
        apply_extraction(flat, "product.strength", parts.strength)
    if parts.form:
        apply_extraction(flat, "product.form", parts.form)


def _apply_concat_overlay(
    flat: CanonicalFlat,
    raw: dict,
    keys: list[str],
    concat_columns: list[ConcatColumn],
    dirty: dict[str, bool],
    remainder_paths: dict[str, str | None],
    decomposed: set[int],
    config: EngineConfig,
) -> None:
    # ---- 1. Flagged concatenated columns (dirty ones only)
    concat_indices = {column.index for column in concat_columns}
    for column in concat_columns:
        key = keys[column.index]
        cell = raw.get(key)
        if cell is None or not dirty.get(key):
            continue
        decomposed.add(column.index)
        text = cell_text(cell)
        decomposition = decompose_concatenated_cell(text, config=config)
        for extraction in decomposition.extractions:
            apply_extraction(flat, extraction.field, extraction.value, text)
        if decomposition.leftover:
            assign_leftover_text(flat, remainder_paths.get(key), decomposition.leftover, text)

    # ---- 2. Dirty description columns that were not flagged
    for idx, key in enumerate(keys):
        if remainder_paths.get(key) != "product.description":
            continue
        if idx in concat_indices or not dirty.get(key):
            continue
        cell = raw.get(key)
        if cell is None:
            continue
        text = cell_text(cell)
        parts = split_name_generic_strength_form(text)
        if parts.strength:
            apply_extraction(flat, "product.strength", parts.strength, text)
        if parts.form:
            apply_extraction(flat, "product.form", parts.form, text)
        assign_leftover_text(
            flat, "product.description", parts.generic_name or parts.leftover or text, text
        )

    # ---- 3. Opportunistic decomposition of textual values
    targets = [
        ("product.generic_name", flat.generic_name, 2),
        ("product.brand_name", flat.brand_name, 3),
        ("product.description", flat.description, 2),
    ]
    for path, value, min_signals in targets:
        if not isinstance(value, str) or not value.strip():
            continue
        if path == "product.generic_name":
            parts = split_name_generic_strength_form(value)
            if parts.strength:
                apply_extraction(flat, "product.strength", parts.strength)
            if parts.form:
                apply_extraction(flat, "product.form", parts.form)
        decomposition = decompose_concatenated_cell(
            value, opportunistic=True, min_signals=min_signals, config=config
        )
        for extraction in decomposition.extractions:
            apply_extraction(flat, extraction.field, extraction.value, value)
        if decomposition.leftover.strip():
            source = None if path == "product.generic_name" else value
            assign_leftover_text(flat, path, decomposition.leftover, source)


def _apply_batch_fallback(
    flat: CanonicalFlat,
    raw: dict,
    keys: list[str],
    remainder_paths: dict[str, str | None],
    decomposed: set[int],
    config: EngineConfig,
) -> None:
    for idx, key in enumerate(keys):
        if remainder_paths.get(key) != "batch.batch_no":
            continue
        cell = raw.get(key)
        if cell is None:
            continue
        decomposed.add(idx)
        text = cell_text(cell)
        for extraction in decompose_concatenated_cell(text, config=config).extractions:
            apply_extraction(flat, extraction.field, extraction.value, text)

    raw_batch = cell_text(flat.batch_no)
    token = _BATCH_TOKEN_RE.search(raw_batch) if raw_batch else None
    if token:
        apply_extraction(flat, "batch.batch_no", token.group(0).upper(), raw_batch)
