# catalog_api/core/normalizers.py

"""
Text normalization utilities for supplier data.

Ensures consistent comparable strings regardless of how a supplier typed
their spreadsheet.
"""

import re
import unicodedata
from typing import Any

# Values that spreadsheet exports write into empty cells
RESERVED_EMPTY_TOKENS = frozenset({"nan", "null", "undefined"})

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def strip_accents(s: str) -> str:
    """Decompose to NFD and drop combining diacritical marks."""
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", s))


def normalize_text(raw: Any) -> str:
    """
    Normalize free text for matching.

    - Lowercase
    - Strip accents ("Á" -> "a", "ñ" -> "n")
    - Replace anything that is not a-z, 0-9 or whitespace with a space
    - Collapse whitespace

    Example:
        'CAÑO 1/2" ÁCERO+inox.' -> 'cano 1 2 acero inox'
    """
    s = strip_accents(_to_str(raw).lower())
    s = _NON_ALNUM.sub(" ", s)
    return _WHITESPACE.sub(" ", s).strip()


def clean_text(raw: Any) -> str:
    """
    Clean a display field.

    Trims and collapses internal whitespace. Nullish values and the
    reserved tokens "nan", "null" and "undefined" (any case) become "".
    Accents and punctuation are kept.
    """
    s = _WHITESPACE.sub(" ", _to_str(raw).strip())
    if not s or s.lower() in RESERVED_EMPTY_TOKENS:
        return ""
    return s


def normalize_alias(raw: Any) -> str:
    """Key used to detect duplicate codes. Keeps punctuation."""
    return clean_text(raw).lower()


def normalize_header(raw: Any) -> str:
    """
    Normalize a column header for lookup.

    "Costo_num" -> "costonum", "Artículo" -> "articulo"
    """
    s = strip_accents(_to_str(raw)).lower()
    return _WHITESPACE.sub("", s).replace("_", "")
