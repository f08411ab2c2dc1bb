"""
Product file reader with container-level structure detection.

Reads an uploaded products file into a plain array-of-arrays matrix and
leaves every decision about headers and schemas to the engine. Handles two
containers:
  A) Workbook (.xlsx / .xlsm) — prefers a sheet named "products", falls back
     to the first sheet. An optional "__meta" sheet carries the template
     version (A1/B1) and header checksum (A2/B2).
  B) Delimited text (.csv / .tsv / .txt) — decoded as UTF-8 (BOM stripped)
     with a latin-1 fallback; the delimiter is sniffed among , ; TAB |.

Fully blank rows are dropped from the matrix. Datetime cells become ISO
"YYYY-MM-DD" strings so date handling downstream only deals with text and
Excel serial numbers.

Public API:
    read_products_file(path_or_buffer, filename) → FileReadResult
"""

import csv
import datetime as dt
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

import openpyxl

from config.schema import META_SHEET_NAME, PRODUCTS_SHEET_NAME
from processing.header_detector import build_raw_rows

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Supported containers
# ---------------------------------------------------------------------------
WORKBOOK_EXTENSIONS: set[str] = {".xlsx", ".xlsm"}
TEXT_EXTENSIONS: set[str] = {".csv", ".tsv", ".txt"}

# Candidate delimiters, in tie-break order (first wins on equal scores).
CANDIDATE_DELIMITERS: list[str] = [",", ";", "\t", "|"]

# Number of leading lines used to score each delimiter candidate.
DELIMITER_SNIFF_ROWS: int = 25


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FileReadResult:
    """Complete result of reading one products file."""

    rows: list[dict[str, object]] = field(default_factory=list)
    matrix: list[list[object]] = field(default_factory=list)
    origin: str = ""                      # "workbook" | "text"
    sheet_name: str = ""
    template_version: str | None = None
    header_checksum: str | None = None
    delimiter: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def template_meta(self) -> dict[str, str] | None:
        """Container metadata in the shape the schema detector expects."""
        if self.template_version is None and self.header_checksum is None:
            return None
        return {
            "template_version": self.template_version,
            "header_checksum": self.header_checksum,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def read_products_file(path_or_buffer, filename: str | None = None) -> FileReadResult:
    """
    Read a products workbook or delimited text file into a raw matrix.

    Args:
        path_or_buffer: Filesystem path, raw bytes, or a binary file-like
            object (e.g. a Streamlit UploadedFile).
        filename: Original file name, used to choose the container type.
            Defaults to the path's name when a path is given.

    Returns:
        FileReadResult with the matrix, header-keyed rows, container
        metadata and any errors encountered. Errors are collected, never
        raised.
    """
    result = FileReadResult()

    if filename is None and isinstance(path_or_buffer, (str, Path)):
        filename = Path(path_or_buffer).name
    filename = filename or ""
    suffix = Path(filename).suffix.lower()

    # ------------------------------------------------------------------
    # 1. Load the raw bytes
    # ------------------------------------------------------------------
    try:
        payload = _read_bytes(path_or_buffer)
    except Exception as exc:
        error_message = f"Cannot read file '{filename}': {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    if not payload:
        error_message = f"File '{filename}' is empty"
        logger.warning(error_message)
        result.errors.append(error_message)
        return result

    # ------------------------------------------------------------------
    # 2. Dispatch on container type
    # ------------------------------------------------------------------
    if suffix in WORKBOOK_EXTENSIONS:
        _read_workbook(payload, filename, result)
    elif suffix in TEXT_EXTENSIONS:
        _read_delimited_text(payload, filename, result)
    else:
        error_message = (
            f"Unsupported file type '{suffix or filename}'. "
            "Expected .xlsx, .xlsm, .csv, .tsv or .txt"
        )
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    # ------------------------------------------------------------------
    # 3. Header-keyed convenience view
    # ------------------------------------------------------------------
    if result.matrix:
        result.rows = build_raw_rows(result.matrix, "headers")

    logger.info(
        f"Finished reading '{filename}' ({result.origin}): "
        f"{len(result.matrix)} non-blank rows, {len(result.errors)} errors"
    )
    return result


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _read_bytes(path_or_buffer) -> bytes:
    """Return the full contents of a path, bytes object or file-like."""
    if isinstance(path_or_buffer, (bytes, bytearray)):
        return bytes(path_or_buffer)
    if isinstance(path_or_buffer, (str, Path)):
        return Path(path_or_buffer).read_bytes()
    if hasattr(path_or_buffer, "getvalue"):
        return path_or_buffer.getvalue()
    return path_or_buffer.read()


def _normalize_cell(value: object) -> object:
    """Convert openpyxl cell values to the scalar types the engine expects."""
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _is_blank_row(values: list[object]) -> bool:
    return all(v is None or str(v).strip() == "" for v in values)


# ── Workbooks ──────────────────────────────────────────────────────────

def _read_workbook(payload: bytes, filename: str, result: FileReadResult) -> None:
    result.origin = "workbook"

    try:
        workbook = openpyxl.load_workbook(io.BytesIO(payload), data_only=True)
    except Exception as exc:
        error_message = f"Cannot open workbook '{filename}': {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return

    worksheet, sheet_name = _select_worksheet(workbook)
    result.sheet_name = sheet_name
    logger.info(f"Reading sheet '{sheet_name}' from '{filename}'")

    for row_values in worksheet.iter_rows(values_only=True):
        values = [_normalize_cell(v) for v in row_values]
        # openpyxl pads rows to the sheet width; drop the trailing padding
        while values and values[-1] is None:
            values.pop()
        if not values or _is_blank_row(values):
            continue
        result.matrix.append(values)

    result.template_version, result.header_checksum = _read_meta_sheet(workbook)
    workbook.close()


def _select_worksheet(workbook: openpyxl.Workbook):
    """
    Pick the worksheet to read.

    Prefers a sheet named "products" (case-insensitive). Falls back to the
    first sheet that is not the metadata sheet.

    Returns:
        Tuple of (worksheet, sheet_name).
    """
    for name in workbook.sheetnames:
        if name.lower() == PRODUCTS_SHEET_NAME:
            return workbook[name], name

    candidates = [n for n in workbook.sheetnames if n != META_SHEET_NAME]
    first_name = candidates[0] if candidates else workbook.sheetnames[0]
    logger.info(
        f"No '{PRODUCTS_SHEET_NAME}' sheet found; using first sheet '{first_name}'"
    )
    return workbook[first_name], first_name


def _read_meta_sheet(workbook: openpyxl.Workbook) -> tuple[str | None, str | None]:
    """Read template version and header checksum from the "__meta" sheet."""
    if META_SHEET_NAME not in workbook.sheetnames:
        return None, None

    sheet = workbook[META_SHEET_NAME]

    def read_cell(ref: str) -> str | None:
        value = sheet[ref].value
        return str(value).strip() if value is not None else None

    template_version = None
    header_checksum = None
    if (read_cell("A1") or "").lower() == "template_version":
        template_version = read_cell("B1")
    if (read_cell("A2") or "").lower() == "header_checksum":
        header_checksum = read_cell("B2")

    if template_version is None and header_checksum is None:
        logger.warning(f"Sheet '{META_SHEET_NAME}' present but carries no template keys")
    return template_version, header_checksum


# ── Delimited text ─────────────────────────────────────────────────────

def _decode_text(payload: bytes) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("UTF-8 decode failed; falling back to latin-1")
        return payload.decode("latin-1")


def _parse_delimited(text: str, delimiter: str) -> list[list[str]]:
    rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    while rows and all(v == "" for v in rows[-1]):
        rows.pop()
    return rows


def detect_delimiter(text: str) -> str:
    """
    Choose the delimiter whose first rows have many, stable field counts.

    Score per candidate = mean field count − variance of field counts over
    the first DELIMITER_SNIFF_ROWS rows. Ties keep the earlier candidate.
    """
    best = CANDIDATE_DELIMITERS[0]
    best_score = -1.0
    for delimiter in CANDIDATE_DELIMITERS:
        counts = [len(r) for r in _parse_delimited(text, delimiter)[:DELIMITER_SNIFF_ROWS]]
        if counts:
            avg = sum(counts) / len(counts)
            variance = sum((c - avg) ** 2 for c in counts) / len(counts)
        else:
            avg = variance = 0.0
        score = avg - variance
        if score > best_score:
            best_score = score
            best = delimiter
    return best


def _read_delimited_text(payload: bytes, filename: str, result: FileReadResult) -> None:
    result.origin = "text"
    text = _decode_text(payload)

    delimiter = "\t" if filename.lower().endswith(".tsv") else detect_delimiter(text)
    result.delimiter = delimiter
    logger.debug(f"Using delimiter {delimiter!r} for '{filename}'")

    try:
        parsed = _parse_delimited(text, delimiter)
    except csv.Error as exc:
        error_message = f"Cannot parse '{filename}' as delimited text: {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return

    result.matrix = [row for row in parsed if not _is_blank_row(row)]
