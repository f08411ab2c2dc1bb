"""
Cell-to-text helpers shared by every engine stage.

Raw cells arrive as str, int, float or None. All pattern checks in the
engine work on text, so numbers are rendered the way a spreadsheet shows
them: 500.0 → "500", 12.5 → "12.5".
"""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"[\r\n]+")


def cell_text(value: object) -> str:
    """Render a raw cell as text without trimming. None becomes ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def sanitize_string(value: object) -> str:
    """Collapse whitespace and line breaks, replace NBSP, NFC-normalize, trim."""
    text = cell_text(value).replace("\u00a0", " ")
    text = _LINE_BREAK_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return unicodedata.normalize("NFC", text).strip()


def collapse_whitespace(value: object) -> str:
    """Trim and collapse internal runs of whitespace to one space."""
    return _WHITESPACE_RE.sub(" ", cell_text(value)).strip()


def is_blank(value: object) -> bool:
    return cell_text(value).strip() == ""
