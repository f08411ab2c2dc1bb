"""
Concatenated-cell decomposition.

Extracts canonical fields (strength, form, pack contents, country of
origin, GTIN, batch, expiry, manufacturer, brand) from a single text cell
that mashes several of them together, e.g.

    "AMOXIL 500MG CAPS 100S INDIA B2231 MFG BY GSK"

The cell is tokenized once. An ordered list of passes then runs over the
immutable token tuple; each pass sees the set of token indices already
claimed by earlier passes and returns at most one extraction plus the
indices it claims. Unclaimed tokens form the leftover text, which the
caller routes to a textual field (generic name, description, ...).

Two helpers sit beside the token passes:
  - a form-phrase anchor that matches the longest trailing dictionary
    phrase of the whole cell ("effervescent tablets" over "tablets")
  - a right-anchored name splitter (generic / strength / form) that
    backfills strength and form when the token passes found none

Opportunistic mode is used on columns that were not flagged as
concatenated: a decomposition is accepted only as a whole, when a
strength plus enough other structural signals are present and the text
is not an ingredient list.

Public API:
    decompose_concatenated_cell(text, opportunistic=False, min_signals=3, config=...) → ConcatDecomposition
    split_name_generic_strength_form(text) → NameSplit
    detect_form_phrase(text) → FormPhrase | None
    gtin13_is_valid(text) → bool
    looks_formula_like(text) → bool
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, NamedTuple

from config.engine_config import DEFAULT_ENGINE_CONFIG, EngineConfig
from config.form_rules import (
    FORM_KEYWORDS,
    FORM_PHRASE_DICTIONARY,
    MANUFACTURER_HINTS,
    MANUFACTURER_MARKERS,
    NAME_SUFFIX_FORMS,
)
from processing.country_normalizer import normalize_country_to_iso2
from processing.sanitizers import has_digit, has_unit_token
from utils.text_cleaning import cell_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Token patterns
# ---------------------------------------------------------------------------
_STRENGTH_SINGLE_RE = re.compile(
    r"^(\d+(\.\d+)?)(MG|G|MCG|UG|µG|ML|IU|%)(/\d+(\.\d+)?(MG|G|ML))?$", re.IGNORECASE
)
_STRENGTH_NUMBER_RE = re.compile(r"^(\d+(\.\d+)?)$")
_STRENGTH_UNIT_RE = re.compile(r"^(MG|G|MCG|UG|µG|ML|IU|%)$", re.IGNORECASE)
_STRENGTH_SLASH_RE = re.compile(r"^/(\d+(\.\d+)?)(MG|G|ML)$", re.IGNORECASE)

_PACK_COUNT_RE = re.compile(r"^(\d{1,4})(S|TAB|TABS|CAP|CAPS|PCS|PIECES)?$", re.IGNORECASE)
_PACK_TIMES_RE = re.compile(r"^[xX](\d{1,4})$")
_GTIN_TOKEN_RE = re.compile(r"^\d{8,16}$")
# Also matches plain B-words such as "BETAMETASONE"; those are taken as batch
# numbers unchanged.
_BATCH_TOKEN_RE = re.compile(r"^B[0-9A-Z]{3,}$", re.IGNORECASE)
_BATCH_LABEL_RE = re.compile(
    r"^(LOT|LOTNO|LOTNO\.|BNO|B\.NO|B-NO|B/NO|BATCHNO|BATCH NO)$", re.IGNORECASE
)
_ALNUM_BATCH_RE = re.compile(r"^[A-Za-z0-9\-_./]+$")
_DATE_TOKEN_RE = re.compile(r"^(\d{2}[/-]\d{2}[/-]\d{2,4}|\d{4}-\d{2}-\d{2})$")
_EXP_LABEL_RE = re.compile(r"^exp:?$", re.IGNORECASE)

_SEGMENT_SPLIT_RE = re.compile(r"[;|,]+|\s+-\s+|\s•\s")
_HEAD_SPLIT_RE = re.compile(r"[;|,]+|\s+-\s+")
BRAND_HEAD_MAX_LENGTH = 40

# ---------------------------------------------------------------------------
# Name-splitter patterns
# ---------------------------------------------------------------------------
_NAME_STRENGTH_RE = re.compile(
    r"([0-9]+(?:[.,][0-9]+)?(?:\s*[+/]\s*[0-9]+(?:[.,][0-9]+)?)*[\s-]*"
    r"(?:mg|mcg|g|ml|iu|iu/ml|-?%)"
    r"(?:[/\-\s]*[0-9]+(?:[.,][0-9]+)?[\s-]*(?:mg|mcg|g|ml|%))?"
    r"(?:\s*/\s*ml)?"
    r"(?:-\s*(?:%\s*)?[wW]/[wW])?)",
    re.IGNORECASE,
)
_HYPHEN_FORM_RE = re.compile(r"^(.*)-\s*([A-Z ][A-Z \-]*)$")
_DOSE_SIGNAL_RE = re.compile(r"(mg|mcg|ml|iu|%)", re.IGNORECASE)

# Longest suffix first so "FILM COATED TABLET" wins over "TABLET".
_SUFFIX_FORM_PATTERNS: list[tuple[re.Pattern, str]] = [
    (
        re.compile(r"(?:\s+|\s*-\s*)" + re.sub(r"\\\s+", r"\\s+", re.escape(key)) + r"\s*$", re.IGNORECASE),
        form,
    )
    for key, form in sorted(NAME_SUFFIX_FORMS.items(), key=lambda kv: -len(kv[0]))
]

# ---------------------------------------------------------------------------
# Formula-likeness
# ---------------------------------------------------------------------------
_FORMULA_UNIT_RE = re.compile(r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|kg|iu|ml|l|%)\b")
_FORMULA_RATIO_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l)\s*/\s*\d+(?:\.\d+)?\s*(mg|mcg|g|kg|ml|l)\b"
)
_FORMULA_PACK_RE = re.compile(r"(\b\d+\s*[xX]\s*\d+|\b\d+\s*(?:'s|pcs|pieces|tabs|caps)\b)")


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class ConcatExtraction:
    """One canonical value pulled out of a cell."""

    field: str          # dotted canonical path, e.g. "product.strength"
    value: object
    confidence: float
    reason: str


@dataclass
class ConcatDecomposition:
    leftover: str = ""
    extractions: list[ConcatExtraction] = field(default_factory=list)

    def get(self, field_path: str) -> object | None:
        """Value of the first extraction for *field_path*, or None."""
        for extraction in self.extractions:
            if extraction.field == field_path:
                return extraction.value
        return None

    def has(self, field_path: str) -> bool:
        return any(e.field == field_path for e in self.extractions)


@dataclass
class NameSplit:
    """Right-anchored split of a product-name cell."""

    generic_name: str | None = None
    strength: str | None = None
    form: str | None = None
    leftover: str | None = None


class FormPhrase(NamedTuple):
    canonical: str
    phrase: str


class _Cell(NamedTuple):
    text: str
    tokens: tuple[str, ...]
    config: EngineConfig


_PassResult = tuple[ConcatExtraction | None, frozenset[int]]
_NOTHING: _PassResult = (None, frozenset())


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def decompose_concatenated_cell(
    text: object,
    opportunistic: bool = False,
    min_signals: int = 3,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ConcatDecomposition:
    """
    Decompose one concatenated cell into canonical extractions.

    Args:
        text: Raw cell value.
        opportunistic: Accept the result only when a strength plus at least
            ``min_signals - 1`` of {form, pack, country, GTIN, batch} were
            found and neither the cell nor the leftover is formula-like.
            A rejected cell yields an empty decomposition.
        min_signals: Signal count required in opportunistic mode.
        config: Allow-lists for brand/manufacturer names with digits.

    Returns:
        ConcatDecomposition with at most one extraction per field.
    """
    cleaned = cell_text(text).strip()
    if not cleaned:
        return ConcatDecomposition()

    cell = _Cell(cleaned, _tokenize(cleaned), config)
    extractions: list[ConcatExtraction] = []

    # ---- 1. Form-phrase anchor over the whole cell
    anchored = detect_form_phrase(cleaned)
    if anchored:
        extractions.append(
            ConcatExtraction("product.form", anchored.canonical, 0.92, "form_phrase_anchor")
        )

    # ---- 2. Token passes, in order; a pass may claim tokens even when
    #         its field was already extracted by the anchor
    claimed: frozenset[int] = frozenset()
    for detector in _PASSES:
        extraction, newly_claimed = detector(cell, claimed)
        claimed = claimed | newly_claimed
        if extraction and not any(e.field == extraction.field for e in extractions):
            extractions.append(extraction)

    # ---- 3. Name-splitter backfill
    split = split_name_generic_strength_form(cleaned)
    fallback_applied = False
    if split.strength and not _has_field(extractions, "product.strength"):
        extractions.append(
            ConcatExtraction("product.strength", split.strength, 0.8, "name_split_strength")
        )
        fallback_applied = True
    if split.form and not _has_field(extractions, "product.form"):
        extractions.append(
            ConcatExtraction("product.form", split.form, 0.75, "name_split_form")
        )
        fallback_applied = True

    # ---- 4. Leftover
    leftover = _build_leftover(cell.tokens, claimed)
    if fallback_applied:
        candidate = split.generic_name or split.leftover
        if candidate:
            leftover = candidate
    elif split.generic_name and (not leftover or leftover == cleaned):
        leftover = split.generic_name

    if opportunistic and not _opportunistic_accept(cleaned, extractions, leftover, min_signals):
        return ConcatDecomposition()
    return ConcatDecomposition(leftover=leftover, extractions=extractions)


def split_name_generic_strength_form(text: object) -> NameSplit:
    """
    Split a Name-like cell into generic name, strength and form.

    The form is found at the right edge (dictionary phrase, "-FORM" suffix
    or trailing form words). The *last* strength block before the form
    boundary is the strength; text before it is the generic name with
    stray "-0.64-" remnants trimmed, text after it is leftover.

    "BETAMETASONE DIPROPIONATE -0.64-%-CREAM" splits into
    generic "BETAMETASONE DIPROPIONATE", strength "0.64%", form "cream".
    """
    result = NameSplit()
    s = re.sub(r"---+$", "", cell_text(text).strip()).strip()
    if not s:
        return result

    upper = s.upper()
    form: str | None = None
    before_form = s

    # ---- 1. Dictionary phrase anchor
    phrase = detect_form_phrase(s)
    if phrase:
        has_dose_signal = has_digit(s) or bool(_DOSE_SIGNAL_RE.search(s))
        if phrase.canonical != "other" or has_dose_signal:
            form = phrase.canonical
            idx = s.lower().rfind(phrase.phrase.lower())
            if idx >= 0:
                before_form = s[:idx].strip()

    # ---- 2. "...-FORM" suffix
    hyphen = _HYPHEN_FORM_RE.match(upper)
    if hyphen:
        candidate = re.sub(r"\s+", " ", hyphen.group(2).strip())
        canonical = NAME_SUFFIX_FORMS.get(candidate)
        if not canonical:
            tail = re.split(r"\s*-\s*", candidate)[-1] or candidate
            canonical = NAME_SUFFIX_FORMS.get(tail)
        if canonical:
            form = canonical
            before_form = s[: len(hyphen.group(1))].strip()

    # ---- 3. Trailing form words
    if not form:
        for pattern, suffix_form in _SUFFIX_FORM_PATTERNS:
            match = pattern.search(s)
            if match:
                form = suffix_form
                before_form = s[: match.start()].strip()
                break

    # ---- 4. Last strength block before the form
    generic: str | None
    strength: str | None = None
    leftover: str | None = None
    matches = list(_NAME_STRENGTH_RE.finditer(before_form))
    if matches:
        last = matches[-1]
        raw_strength = last.group(0).strip()
        strength = _clean_strength(raw_strength)

        start = before_form.rfind(last.group(0))
        cut = start if start >= 0 else last.start()
        generic = before_form[:cut]
        generic = re.sub(r"\s*-\s*\d+(?:[.,]\d+)?-?$", "", generic)
        generic = re.sub(r"[-\s+,]+$", "", generic).strip()
        leftover = before_form[cut + len(last.group(0)):].strip() or None

        if (
            re.search(r"%\s*[wW]/[wW]", before_form)
            and not re.search(r"%[wW]/[wW]", strength)
            and strength.endswith("%")
        ):
            strength = f"{strength}w/w"
    else:
        generic = before_form.strip()

    result.generic_name = generic or None
    result.strength = strength or None
    result.form = form
    if not form and leftover:
        tail = re.sub(r"^[-\s]+", "", leftover).upper()
        if tail in NAME_SUFFIX_FORMS:
            result.form = NAME_SUFFIX_FORMS[tail]
            leftover = None
    result.leftover = leftover
    return result


def detect_form_phrase(text: object) -> FormPhrase | None:
    """
    Longest dictionary phrase the cell ends with.

    Phrases in the catch-all "other" bucket (shampoo, sachet, test, ...)
    only count when the cell also has a digit or unit token.
    """
    lower = cell_text(text).lower()
    has_dose = has_digit(lower) or has_unit_token(lower)
    for canonical, variants in FORM_PHRASE_DICTIONARY.items():
        for variant in sorted(variants, key=len, reverse=True):
            if lower.endswith(variant.lower()):
                if canonical == "other" and not has_dose:
                    continue
                return FormPhrase(canonical, variant)
    return None


def gtin13_is_valid(text: object) -> bool:
    """True for exactly 13 digits whose mod-10 (1,3 weighted) check digit matches."""
    digits = re.sub(r"\D", "", cell_text(text))
    if len(digits) != 13:
        return False
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(digits[:12]))
    return (10 - total % 10) % 10 == int(digits[12])


def looks_formula_like(text: object, unit_re: re.Pattern = _FORMULA_UNIT_RE) -> bool:
    """
    Ingredient-list shape: "Alumina, Magnesia and Simethicone".

    At least one separator (, + & or " and "), no dose-unit or pack-count
    token, and at least two alphabetic words of 6+ letters.
    """
    t = cell_text(text).lower()
    if not t.strip():
        return False
    separators = len(re.findall(r"[,+&]", t)) + (1 if " and " in t else 0)
    has_unit = bool(unit_re.search(t) or _FORMULA_RATIO_RE.search(t))
    has_pack = bool(_FORMULA_PACK_RE.search(t))
    long_words = sum(1 for w in re.split(r"[^a-z]+", t) if len(w) >= 6)
    return separators >= 1 and not has_unit and not has_pack and long_words >= 2


# ═══════════════════════════════════════════════════════════════════════════
# Token passes
# ═══════════════════════════════════════════════════════════════════════════

def _detect_strength(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    tokens = cell.tokens
    for i, tok in enumerate(tokens):
        if i not in claimed and _STRENGTH_SINGLE_RE.match(tok):
            return (
                ConcatExtraction("product.strength", tok, 0.9, "strength_pattern_single"),
                frozenset({i}),
            )

    # Number token followed by a unit token, optionally "/5ML" or "/ 5ML"
    for i in range(len(tokens) - 1):
        if i in claimed or i + 1 in claimed:
            continue
        if not (_STRENGTH_NUMBER_RE.match(tokens[i]) and _STRENGTH_UNIT_RE.match(tokens[i + 1])):
            continue
        text = f"{tokens[i]}{tokens[i + 1]}"
        taken = {i, i + 1}
        if i + 2 < len(tokens) and i + 2 not in claimed:
            third = tokens[i + 2]
            if third == "/" and i + 3 < len(tokens) and i + 3 not in claimed:
                if _STRENGTH_SLASH_RE.match(f"/{tokens[i + 3]}"):
                    text = f"{text}/{tokens[i + 3]}"
                    taken |= {i + 2, i + 3}
            elif _STRENGTH_SLASH_RE.match(third):
                text = f"{text}{third}"
                taken.add(i + 2)
        return (
            ConcatExtraction("product.strength", text, 0.85, "strength_pattern_multi"),
            frozenset(taken),
        )
    return _NOTHING


def _detect_form(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    for i, tok in enumerate(cell.tokens):
        if i in claimed:
            continue
        normalized = FORM_KEYWORDS.get(tok.upper())
        if normalized and not has_digit(tok) and not has_unit_token(tok):
            return ConcatExtraction("product.form", normalized, 0.9, "form_keyword"), frozenset({i})
    return _NOTHING


def _detect_pack_contents(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    for i, tok in enumerate(cell.tokens):
        if i in claimed:
            continue
        match = _PACK_COUNT_RE.match(tok) or _PACK_TIMES_RE.match(tok)
        if match:
            return (
                ConcatExtraction("pkg.pieces_per_unit", int(match.group(1)), 0.8, "pack_count_pattern"),
                frozenset({i}),
            )
    return _NOTHING


def _detect_country(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    tokens = cell.tokens
    for length in range(1, 4):
        for i in range(len(tokens) - length + 1):
            window = range(i, i + length)
            if all(j in claimed for j in window):
                continue
            iso2 = normalize_country_to_iso2(" ".join(tokens[j] for j in window))
            if iso2:
                confidence = 0.9 if length == 1 else 0.95
                return (
                    ConcatExtraction("identity.coo", iso2, confidence, "country_token"),
                    frozenset(window),
                )
    return _NOTHING


def _detect_gtin(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    for i, tok in enumerate(cell.tokens):
        if i not in claimed and _GTIN_TOKEN_RE.match(tok) and gtin13_is_valid(tok):
            return ConcatExtraction("identity.sku", tok, 0.95, "gtin13"), frozenset({i})
    return _NOTHING


def _detect_batch(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    tokens = cell.tokens
    for i, tok in enumerate(tokens):
        if i in claimed:
            continue
        if _BATCH_TOKEN_RE.match(tok):
            if _is_batch_shaped(tok):
                return ConcatExtraction("batch.batch_no", tok, 0.8, "batch_pattern"), frozenset({i})
            continue
        if _BATCH_LABEL_RE.match(tok) and i + 1 < len(tokens) and i + 1 not in claimed:
            if _is_batch_shaped(tokens[i + 1]):
                return (
                    ConcatExtraction("batch.batch_no", tokens[i + 1], 0.75, "batch_labeled"),
                    frozenset({i, i + 1}),
                )
    return _NOTHING


def _detect_expiry(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    tokens = cell.tokens
    for i, tok in enumerate(tokens):
        if i in claimed:
            continue
        if _DATE_TOKEN_RE.match(tok.strip()):
            return ConcatExtraction("batch.expiry_date", tok, 0.8, "date_token"), frozenset({i})
        if _EXP_LABEL_RE.match(tok) and i + 1 < len(tokens) and i + 1 not in claimed:
            if _DATE_TOKEN_RE.match(tokens[i + 1].strip()):
                return (
                    ConcatExtraction("batch.expiry_date", tokens[i + 1], 0.8, "exp_label"),
                    frozenset({i, i + 1}),
                )
    return _NOTHING


def _detect_manufacturer_phrase(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    """'MFG BY <name>' style markers; the remainder of the cell is the value."""
    upper = cell.text.upper()
    idx, marker = -1, ""
    for candidate in MANUFACTURER_MARKERS:
        pos = upper.find(candidate)
        if pos != -1 and (idx == -1 or pos < idx):
            idx, marker = pos, candidate
    if idx == -1:
        pos = upper.find(" BY ")
        if pos != -1 and pos < len(upper) - 5:
            idx, marker = pos, " BY "
    if idx == -1:
        return _NOTHING

    after = cell.text[idx + len(marker):].strip()
    if len(after) < 3 or has_unit_token(after):
        return _NOTHING
    if has_digit(after) and not cell.config.is_allowed_numeric_manufacturer(after):
        return _NOTHING
    return ConcatExtraction("product.manufacturer_name", after, 0.8, "manufacturer_phrase"), frozenset()


def _detect_manufacturer_hint(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    """Last delimited segment carrying a company word (PHARMA, LTD, ...)."""
    segments = [s.strip() for s in _SEGMENT_SPLIT_RE.split(cell.text) if s.strip()]
    for segment in reversed(segments):
        upper = segment.upper()
        if not any(hint in upper for hint in MANUFACTURER_HINTS):
            continue
        if has_unit_token(segment):
            continue
        if has_digit(segment) and not cell.config.is_allowed_numeric_manufacturer(segment):
            continue
        return (
            ConcatExtraction("product.manufacturer_name", segment, 0.75, "manufacturer_hint_tail"),
            frozenset(),
        )
    return _NOTHING


def _detect_brand_head(cell: _Cell, claimed: frozenset[int]) -> _PassResult:
    """First word of the head segment, once strength and form are stripped."""
    head = _HEAD_SPLIT_RE.split(cell.text)[0].strip()
    if not head or len(head) > BRAND_HEAD_MAX_LENGTH:
        return _NOTHING

    split = split_name_generic_strength_form(cell.text)
    candidate = head
    for part in (split.strength, split.form):
        if part:
            candidate = re.sub(re.escape(part), "", candidate, count=1, flags=re.IGNORECASE).strip()
    words = candidate.split()
    if not words:
        return _NOTHING

    candidate = words[0]
    if has_digit(candidate) and not cell.config.is_allowed_numeric_brand(candidate):
        return _NOTHING
    if has_unit_token(candidate):
        return _NOTHING
    if any(keyword in candidate.upper() for keyword in FORM_KEYWORDS):
        return _NOTHING
    return ConcatExtraction("product.brand_name", candidate, 0.6, "brand_head_heuristic"), frozenset()


_PASSES: list[Callable[[_Cell, frozenset[int]], _PassResult]] = [
    _detect_strength,
    _detect_form,
    _detect_pack_contents,
    _detect_country,
    _detect_gtin,
    _detect_batch,
    _detect_expiry,
    _detect_manufacturer_phrase,
    _detect_manufacturer_hint,
    _detect_brand_head,
]


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _tokenize(text: str) -> tuple[str, ...]:
    replaced = re.sub(r"\s+", " ", re.sub(r"[;,]+", " ", text)).strip()
    return tuple(part for part in replaced.split(" ") if part)


def _build_leftover(tokens: tuple[str, ...], claimed: frozenset[int]) -> str:
    remaining = " ".join(t for i, t in enumerate(tokens) if i not in claimed).strip()
    if not re.search(r"[A-Za-z]", remaining):
        return ""
    return remaining


def _is_batch_shaped(token: str) -> bool:
    return (
        bool(_ALNUM_BATCH_RE.match(token))
        and bool(re.search(r"[A-Za-z]", token))
        and not has_unit_token(token)
    )


def _has_field(extractions: list[ConcatExtraction], field_path: str) -> bool:
    return any(e.field == field_path for e in extractions)


def _clean_strength(raw: str) -> str:
    if re.search(r"-\s*%\s*[wW]/[wW]", raw):
        return re.sub(r"-\s*%\s*([wW]/[wW])", r"%\1", raw)     # "12-%w/w" → "12%w/w"
    if re.search(r"%-\s*[wW]/[wW]", raw):
        return raw
    return re.sub(r"-\s*%", "%", raw, count=1)                 # "0.64-%" → "0.64%"


def _opportunistic_accept(
    raw: str,
    extractions: list[ConcatExtraction],
    leftover: str,
    min_signals: int,
) -> bool:
    if not _has_field(extractions, "product.strength"):
        return False
    additional = sum(
        1
        for path in (
            "product.form",
            "pkg.pieces_per_unit",
            "identity.coo",
            "identity.sku",
            "batch.batch_no",
        )
        if _has_field(extractions, path)
    )
    if additional < max(0, min_signals - 1):
        return False
    if looks_formula_like(raw) or looks_formula_like(leftover):
        logger.debug(f"Opportunistic decomposition rejected as formula-like: '{raw}'")
        return False
    return True
