"""
Field sanitizers: one normalizer/validator per canonical field.

Every sanitizer is a pure function value → SanitizeResult(value, issues).
Sanitizers never raise; problems are reported as Issue objects with a
code from the taxonomy below and a level of "error" or "warn".

Issue codes:
  form         E_FORM_MISSING, E_FORM_NUMERIC, E_FORM_INVALID,
               W_FORM_AUTOCORRECT, E_TEXT_DIGITS_SUSPECT
  strength     E_STRENGTH_FORMAT
  gtin         E_GTIN_DIGITS, E_GTIN_LEN
  boolean      E_BOOL
  batch_no     E_BATCH_ALNUM, E_BATCH_ALPHA_NUM_MIX, E_BATCH_UNIT_TOKEN,
               E_BATCH_STRENGTH_LIKE, W_BATCH_TRUNCATED
  expiry_date  E_DATE_FMT, E_DATE_MM, E_DATE_DD, W_EXPIRED
  number       E_NUM, E_NUM_GE, E_NUM_GT
  generic_name E_GENERIC_MISSING, E_GENERIC_INVALID
  cat/frm/pkg  E_CAT_*, E_FRM_*, E_PKG_* (MISSING / FORMAT)
  coo          E_COO_MISSING, E_COO_FORMAT

Public API:
    sanitize_form(value) → SanitizeResult
    sanitize_strength(value) → SanitizeResult
    sanitize_gtin(value) → SanitizeResult
    sanitize_bool(value) → SanitizeResult
    sanitize_batch_no(value) → SanitizeResult
    sanitize_expiry(value) → SanitizeResult
    sanitize_number(value, gt=None, ge=None) → SanitizeResult
    sanitize_generic_name(value) → SanitizeResult
    sanitize_cat / sanitize_frm / sanitize_pkg / sanitize_coo(value) → SanitizeResult
    sanitize_text(value) → str | None
    parse_date_flexible(value) → str | None
    is_future_date(iso) → bool
"""

import calendar
import datetime as dt
import logging
import re
import unicodedata
from dataclasses import dataclass, field

from config.form_rules import (
    BATCH_MAX_LENGTH,
    BOOLEAN_FALSE_TOKENS,
    BOOLEAN_TRUE_TOKENS,
    FORM_AUTOCORRECT_MAX_DISTANCE,
    FORM_ENUM,
    SANITIZER_FORM_SYNONYMS,
)
from utils.fuzzy_match import levenshtein
from utils.text_cleaning import cell_text, collapse_whitespace

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared hygiene patterns
# ---------------------------------------------------------------------------
UNIT_TOKEN_RE = re.compile(r"\b(mg|mcg|g|kg|ml|l|iu|%|w/v|w/w|v/v)\b", re.IGNORECASE)
STRENGTH_LIKE_RE = re.compile(
    r"^\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l|iu|%)"
    r"(?:\s*/\s*\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l|%))?$",
    re.IGNORECASE,
)
_PUNCTUATION_RE = re.compile(r"[-,/&.]")
_ALNUM_BATCH_RE = re.compile(r"^[A-Za-z0-9\-_./]+$")
_LETTER_RE = re.compile(r"[A-Za-z]")

_NUMERIC_TEXT_RE = re.compile(r"^\d+(?:\.\d+)?$")
_JS_NUMBER_RE = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")

_STRENGTH_VALID_RE = re.compile(
    r"^(\d+(\.\d+)?(mg|g|mcg|ml|%)|\d+(\.\d+)?(mg|g|mcg|ml)/\d+(\.\d+)?(mg|g|mcg|ml))$",
    re.IGNORECASE,
)

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DDMMYYYY_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_SERIAL_RE = re.compile(r"^\d{3,5}$")
_EXCEL_EPOCH = dt.date(1899, 12, 31)

MONTHS: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Issue:
    """A sanitizer-local problem with one field."""

    field: str
    code: str
    msg: str
    level: str = "error"   # "error" | "warn"


@dataclass
class SanitizeResult:
    """Normalized value (None when rejected) plus the issues raised."""

    value: object = None
    issues: list[Issue] = field(default_factory=list)
    suggestion: str | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Hygiene predicates (shared with the canonicalizer and decomposer)
# ═══════════════════════════════════════════════════════════════════════════

def ascii_lower(value: object) -> str:
    """NFKD-fold, drop non-ASCII, lowercase, trim."""
    folded = unicodedata.normalize("NFKD", cell_text(value))
    return "".join(ch for ch in folded if " " <= ch <= "\x7f").lower().strip()


def has_digit(value: object) -> bool:
    return bool(re.search(r"\d", cell_text(value)))


def has_unit_token(value: object) -> bool:
    return bool(UNIT_TOKEN_RE.search(cell_text(value)))


def punctuation_count(value: object) -> int:
    return len(_PUNCTUATION_RE.findall(cell_text(value)))


def is_alphanumeric_batch(value: object) -> bool:
    """Batch charset with at least one letter, or a run of 4+ digits."""
    text = cell_text(value)
    if not _ALNUM_BATCH_RE.match(text):
        return False
    return bool(_LETTER_RE.search(text)) or bool(re.match(r"^\d{4,}$", text))


def to_number(value: object) -> float | int | None:
    """
    Strict numeric parse of a cell: commas dropped, "" → 0, junk → None.

    Integral results come back as int so quantities read naturally.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = cell_text(value).replace(",", "").strip()
        if text == "":
            return 0
        if not _JS_NUMBER_RE.match(text):
            return None
        number = float(text)
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def sanitize_text(value: object) -> str | None:
    """Whitespace-collapsed text, or None when nothing remains."""
    return collapse_whitespace(value) or None


def sanitize_form(value: object) -> SanitizeResult:
    """
    Normalize a dosage form to the canonical enum.

    Exact synonym hits map directly. Anything else is matched by edit
    distance against the synonym keys and the enum itself; a distance of
    at most 2 is accepted with a W_FORM_AUTOCORRECT warning.
    """
    issues: list[Issue] = []
    raw = ascii_lower(value)
    if not raw:
        return SanitizeResult(issues=[Issue("form", "E_FORM_MISSING", "form required")])
    if _NUMERIC_TEXT_RE.match(raw):
        return SanitizeResult(
            issues=[Issue("form", "E_FORM_NUMERIC", "form cannot be numeric")]
        )
    if has_digit(raw) or has_unit_token(raw):
        issues.append(
            Issue("form", "E_TEXT_DIGITS_SUSPECT", "form must not contain digits/units", "warn")
        )

    if raw in SANITIZER_FORM_SYNONYMS:
        return SanitizeResult(value=SANITIZER_FORM_SYNONYMS[raw], issues=issues)

    # Nearest neighbour; first candidate wins ties
    best_mapped: str | None = None
    best_distance: int | None = None
    for candidate in [*SANITIZER_FORM_SYNONYMS.keys(), *FORM_ENUM]:
        distance = levenshtein(raw, candidate)
        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_mapped = SANITIZER_FORM_SYNONYMS.get(
                candidate, candidate if candidate in FORM_ENUM else "other"
            )

    if best_distance is not None and best_distance <= FORM_AUTOCORRECT_MAX_DISTANCE:
        autocorrect = Issue(
            "form",
            "W_FORM_AUTOCORRECT",
            f'autocorrected "{cell_text(value)}"→"{best_mapped}"',
            "warn",
        )
        return SanitizeResult(
            value=best_mapped, issues=[autocorrect, *issues], suggestion=best_mapped
        )

    issues.append(Issue("form", "E_FORM_INVALID", f'invalid form "{cell_text(value)}"'))
    return SanitizeResult(issues=issues)


def sanitize_strength(value: object) -> SanitizeResult:
    """Compact a strength ("500 MG" → "500mg") and check NUMBER+UNIT[/NUMBER+UNIT]."""
    if not value:
        return SanitizeResult()
    text = re.sub(r"[μµ]", "mc", cell_text(value))
    text = re.sub(r"\s+", "", text)
    text = re.sub(r"MCG", "mcg", text, flags=re.IGNORECASE)
    text = re.sub(r"MG", "mg", text, flags=re.IGNORECASE)
    text = re.sub(r"ML", "ml", text, flags=re.IGNORECASE)
    text = re.sub(r"G(?!/)", "g", text)

    issues: list[Issue] = []
    if not _STRENGTH_VALID_RE.match(text):
        issues.append(Issue("strength", "E_STRENGTH_FORMAT", "use like 500mg, 5mg/5ml, 1%"))
    return SanitizeResult(value=text, issues=issues)


def sanitize_gtin(value: object) -> SanitizeResult:
    if not value:
        return SanitizeResult()
    digits = re.sub(r"\D+", "", cell_text(value))
    if not digits:
        return SanitizeResult(issues=[Issue("gtin", "E_GTIN_DIGITS", "GTIN must be digits only")])
    issues: list[Issue] = []
    if len(digits) < 8 or len(digits) > 14:
        issues.append(Issue("gtin", "E_GTIN_LEN", "GTIN length must be 8–14"))
    return SanitizeResult(value=digits, issues=issues)


def sanitize_bool(value: object) -> SanitizeResult:
    if isinstance(value, bool):
        return SanitizeResult(value=value)
    token = ascii_lower(value)
    if not token:
        return SanitizeResult()
    if token in BOOLEAN_TRUE_TOKENS:
        return SanitizeResult(value=True)
    if token in BOOLEAN_FALSE_TOKENS:
        return SanitizeResult(value=False)
    return SanitizeResult(
        issues=[Issue("boolean", "E_BOOL", f'not a boolean: "{cell_text(value)}"')]
    )


def sanitize_batch_no(value: object) -> SanitizeResult:
    """
    Normalize a batch/lot number.

    Uppercases, narrows to an embedded B### token when present, strips to
    [A-Z0-9./-], collapses repeated separators and trims separators at the
    ends. Values longer than 20 characters are truncated with a warning.
    """
    if not value:
        return SanitizeResult()
    text = cell_text(value).upper()
    labeled = re.search(r"\bB[0-9A-Z]{3,}\b", text)
    if labeled:
        text = labeled.group(0)
    text = re.sub(r"[^A-Z0-9./-]", "", text)
    text = re.sub(r"\.{2,}", ".", text)
    text = re.sub(r"-{2,}", "-", text)
    text = re.sub(r"/{2,}", "/", text)
    text = re.sub(r"^[./-]+|[./-]+$", "", text)

    issues: list[Issue] = []
    if len(text) > BATCH_MAX_LENGTH:
        text = text[:BATCH_MAX_LENGTH]
        issues.append(
            Issue("batch_no", "W_BATCH_TRUNCATED", f"trimmed to max {BATCH_MAX_LENGTH} chars", "warn")
        )

    if text:
        if not is_alphanumeric_batch(text):
            issues.append(Issue("batch_no", "E_BATCH_ALNUM", "batch_no must be alphanumeric"))
        elif not _LETTER_RE.search(text):
            issues.append(
                Issue(
                    "batch_no",
                    "E_BATCH_ALPHA_NUM_MIX",
                    "batch_no has no letters; check it is not a quantity or code",
                    "warn",
                )
            )
        if has_unit_token(text):
            issues.append(Issue("batch_no", "E_BATCH_UNIT_TOKEN", "batch_no must not contain units"))
        if STRENGTH_LIKE_RE.match(text):
            issues.append(Issue("batch_no", "E_BATCH_STRENGTH_LIKE", "batch_no looks like strength"))
    return SanitizeResult(value=text, issues=issues)


def sanitize_expiry(value: object) -> SanitizeResult:
    """Strict DD/MM/YYYY validator used for hand-entered template dates."""
    if not value:
        return SanitizeResult()
    text = cell_text(value).strip()
    match = _DDMMYYYY_RE.match(text)
    if not match:
        return SanitizeResult(issues=[Issue("expiry_date", "E_DATE_FMT", "use DD/MM/YYYY")])

    day, month, year = (int(g) for g in match.groups())
    issues: list[Issue] = []
    month_ok = 1 <= month <= 12
    if not month_ok:
        issues.append(Issue("expiry_date", "E_DATE_MM", "month 01–12"))
    days_in_month = calendar.monthrange(year, month)[1] if month_ok else 31
    day_ok = 1 <= day <= days_in_month
    if not day_ok:
        issues.append(Issue("expiry_date", "E_DATE_DD", f"day 01–{days_in_month}"))
    if month_ok and day_ok and dt.date(year, month, day) < dt.date.today():
        issues.append(Issue("expiry_date", "W_EXPIRED", "date is in the past", "warn"))
    return SanitizeResult(value=text, issues=issues)


def sanitize_number(value: object, gt: float | None = None, ge: float | None = None) -> SanitizeResult:
    """Locale-agnostic number with optional strict (gt) or inclusive (ge) lower bound."""
    if value is None or value == "":
        return SanitizeResult()
    number = to_number(value)
    if number is None:
        return SanitizeResult(issues=[Issue("number", "E_NUM", "not a number")])
    issues: list[Issue] = []
    if ge is not None and number < ge:
        issues.append(Issue("number", "E_NUM_GE", f"must be ≥ {ge}"))
    if gt is not None and number <= gt:
        issues.append(Issue("number", "E_NUM_GT", f"must be > {gt}"))
    return SanitizeResult(value=number, issues=issues)


def sanitize_generic_name(value: object) -> SanitizeResult:
    """Generic name with digits and dose units removed; empty after that is invalid."""
    text = collapse_whitespace(value)
    if not text:
        return SanitizeResult(
            issues=[Issue("generic_name", "E_GENERIC_MISSING", "generic_name required")]
        )
    text = re.sub(r"[0-9]", "", text)
    text = re.sub(r"\b(mg|mcg|ml|iu|%|g)\b", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\s{2,}", " ", text).strip()
    if not text:
        return SanitizeResult(
            issues=[Issue("generic_name", "E_GENERIC_INVALID", "name must not contain numbers")]
        )
    return SanitizeResult(value=text)


def sanitize_cat(value: object) -> SanitizeResult:
    return _sanitize_code(
        value, "cat", r"^[A-Z]{3}$", "category code required", "use 3-letter code (e.g., ANT)"
    )


def sanitize_frm(value: object) -> SanitizeResult:
    return _sanitize_code(
        value, "frm", r"^[A-Z]{2,3}$", "form code required",
        "use 2–3 letter code (e.g., TB, CP, SY)",
    )


def sanitize_pkg(value: object) -> SanitizeResult:
    return _sanitize_code(
        value, "pkg", r"^(\d+[A-Z]+(X\d+[A-Z]+)?)$", "package code required",
        "use 30TAB, 1BTLX100ML, 1VIALX10ML",
    )


def sanitize_coo(value: object) -> SanitizeResult:
    return _sanitize_code(
        value, "coo", r"^[A-Z]{2}$", "country code required",
        "use 2-letter ISO-2 code (e.g., IN, ET)",
    )


def parse_date_flexible(value: object) -> str | None:
    """
    Parse common expiry spellings into an ISO YYYY-MM-DD string.

    Supported shapes:
      - YYYY-MM-DD
      - DD/MM/YYYY
      - Excel serial numbers 60–399999 (1900 leap-year bug honoured)
      - MMM-YY, MMM/YYYY, MMM YYYY → last day of that month
      - MM-YY, MM/YYYY, MM YYYY → last day of that month

    Returns:
        ISO date string, or None when the text is empty or unparseable.
    """
    if value is None or value == "":
        return None
    text = cell_text(value).strip()
    if not text:
        return None
    match = _ISO_DATE_RE.match(text)
    if match:
        year, month, day = match.groups()
        return _calendar_date(year, month, day)
    match = _DDMMYYYY_RE.match(text)
    if match:
        day, month, year = match.groups()
        return _calendar_date(year, month, day)

    # ---- Excel serial dates
    if _SERIAL_RE.match(text):
        serial = int(text)
        if 59 < serial < 400000:
            offset = serial - 1 if serial > 60 else serial
            return (_EXCEL_EPOCH + dt.timedelta(days=offset)).isoformat()

    # ---- Month-year shapes
    norm = re.sub(r"\s+", " ", text.lower().replace(",", "")).strip()
    parts = [p for p in re.split(r"[-/ ]+", norm) if p]
    if len(parts) != 2:
        return None
    month_part, year_part = parts

    if re.search(r"[a-z]", month_part):
        month = (
            MONTHS.get(month_part[:4])
            or MONTHS.get(month_part)
            or MONTHS.get(month_part[:3])
        )
        year = _two_part_year(year_part)
        if month and year is not None and 1900 <= year <= 2100:
            return _last_day_of_month(year, month)

    if re.match(r"^\d{1,2}$", month_part) and re.match(r"^\d{2,4}$", year_part):
        month = int(month_part)
        year = _two_part_year(year_part)
        if 1 <= month <= 12 and year is not None and 1900 <= year <= 2100:
            return _last_day_of_month(year, month)

    return None


def is_future_date(iso: str) -> bool:
    """True when *iso* is strictly after today's UTC date."""
    try:
        target = dt.date.fromisoformat(iso)
    except (TypeError, ValueError):
        return False
    today = dt.datetime.now(dt.timezone.utc).date()
    return target > today


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _sanitize_code(value: object, field_name: str, pattern: str, missing_msg: str, format_msg: str) -> SanitizeResult:
    code = cell_text(value).strip().upper()
    prefix = f"E_{field_name.upper()}"
    if not code:
        return SanitizeResult(issues=[Issue(field_name, f"{prefix}_MISSING", missing_msg)])
    issues: list[Issue] = []
    if not re.match(pattern, code):
        issues.append(Issue(field_name, f"{prefix}_FORMAT", format_msg))
    return SanitizeResult(value=code, issues=issues)


def _two_part_year(text: str) -> int | None:
    if not re.match(r"^\d+$", text):
        return None
    return 2000 + int(text) if len(text) == 2 else int(text)


def _calendar_date(year: str, month: str, day: str) -> str | None:
    """ISO string for a real calendar date; None for e.g. 31/02 or month 13."""
    try:
        return dt.date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def _last_day_of_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}-{calendar.monthrange(year, month)[1]:02d}"
