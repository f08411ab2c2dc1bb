"""
Country normalization: free text → ISO-3166 alpha-2.

Resolution order, first hit wins:
  1. Direct ISO-2 code ("et", "IN") that pycountry knows
  2. Manual alias table for messy real-world spellings ("U.S.A", "Bharat")
  3. Exact case-insensitive pycountry lookup (name, official or common name)
  4. Bounded fuzzy containment over pycountry names — prefix matches score
     by the longer key, substring matches by the shorter one; keys shorter
     than 5 letters never resolve fuzzily ("mars" must not become the
     Marshall Islands)

Public API:
    normalize_country_to_iso2(text) → str | None
    iso2_to_country_name(code) → str | None
"""

import logging
import re
import unicodedata

import pycountry

from config.countries import FUZZY_MIN_KEY_LENGTH, MANUAL_ALIAS_TO_ISO2

logger = logging.getLogger(__name__)

_ISO2_RE = re.compile(r"^[A-Z]{2}$")
_NON_LETTER_RE = re.compile(r"[^a-z]")
_NAME_ATTRIBUTES = ("name", "common_name", "official_name")


def normalize_country_key(text: str) -> str:
    """Lowercase, strip accents and keep only the letters a-z."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_LETTER_RE.sub("", stripped)


def _country_name_keys() -> list[tuple[str, str]]:
    """(normalized name, ISO-2) for every pycountry name, in database order."""
    keys: list[tuple[str, str]] = []
    for country in pycountry.countries:
        seen: set[str] = set()
        for attribute in _NAME_ATTRIBUTES:
            key = normalize_country_key(getattr(country, attribute, None) or "")
            if key and key not in seen:
                seen.add(key)
                keys.append((key, country.alpha_2))
    return keys


_NAME_KEYS: list[tuple[str, str]] = _country_name_keys()


def normalize_country_to_iso2(text: str | None) -> str | None:
    """
    Resolve arbitrary country text to an ISO-3166 alpha-2 code.

    Args:
        text: Country name, alias or code. None and blank input return None.

    Returns:
        Upper-case ISO-2 code, or None when nothing resolves.
    """
    if text is None:
        return None
    trimmed = str(text).strip()
    if not trimmed:
        return None

    upper = trimmed.upper()
    if _ISO2_RE.match(upper) and pycountry.countries.get(alpha_2=upper):
        return upper

    key = normalize_country_key(trimmed)
    if not key:
        return None

    alias = MANUAL_ALIAS_TO_ISO2.get(key)
    if alias:
        return alias

    by_name = _lookup_by_name(trimmed)
    if by_name:
        return by_name

    fuzzy = _fuzzy_match_country(key)
    if fuzzy:
        logger.debug(f"Fuzzy country match '{trimmed}' → {fuzzy}")
    return fuzzy


def iso2_to_country_name(code: str | None) -> str | None:
    """English display name for an ISO-2 code, or None when unknown."""
    if not code or not _ISO2_RE.match(code.strip().upper()):
        return None
    country = pycountry.countries.get(alpha_2=code.strip().upper())
    if country is None:
        return None
    return getattr(country, "common_name", None) or country.name


def _lookup_by_name(text: str) -> str | None:
    # pycountry.lookup also accepts alpha-3 and numeric codes; only names count here
    try:
        country = pycountry.countries.lookup(text)
    except LookupError:
        return None
    wanted = text.lower()
    for attribute in _NAME_ATTRIBUTES:
        value = getattr(country, attribute, None)
        if value and value.lower() == wanted:
            return country.alpha_2
    return None


def _fuzzy_match_country(key: str) -> str | None:
    best_code: str | None = None
    best_score = 0
    for name_key, code in _NAME_KEYS:
        if name_key == key:
            return code
        if name_key.startswith(key) or key.startswith(name_key):
            score = max(len(key), len(name_key))
        elif name_key in key or key in name_key:
            score = min(len(key), len(name_key))
        else:
            continue
        if score > best_score:
            best_score = score
            best_code = code

    if best_code and len(key) >= FUZZY_MIN_KEY_LENGTH:
        return best_code
    return None
