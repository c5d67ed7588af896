# catalog_api/core/prices.py

"""
Price parsing for supplier spreadsheets.

Supplier lists mix locales freely ("1.234,56", "1,234.56", "$ 12 345,00"),
so the decimal separator is inferred per cell instead of per file.
"""

import math
import re
from typing import Any

_SPACES = re.compile(r"[\s\u00a0\u202f]+")
_NON_NUMERIC = re.compile(r"[^0-9,.\-]")
# Longest leading float literal, the way a lenient float parser reads it
_FLOAT_PREFIX = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def _collapse_separator(s: str, sep: str) -> str:
    """Keep only the last `sep` as the decimal point, drop the others."""
    parts = s.split(sep)
    decimal = parts.pop()
    return f"{''.join(parts)}.{decimal}"


def normalize_number_string(raw: Any) -> str:
    """
    Normalize a locale-ambiguous number to a "." decimal literal.

    Handles:
    - Currency symbols and letters ("ARS 1.234,56" -> "1234.56")
    - Spaces, including non-breaking ones ("12 345,00" -> "12345.00")
    - Mixed separators: the last one is the decimal point
    - Repeated separators: all but the last are thousands separators
      ("12,345,67" -> "12345.67", no digit grouping validation)

    Returns "" when nothing numeric is left.
    """
    trimmed = ("" if raw is None else str(raw)).strip()
    if not trimmed:
        return ""

    clean = _NON_NUMERIC.sub("", _SPACES.sub("", trimmed))
    if not clean:
        return ""

    has_comma = "," in clean
    has_dot = "." in clean

    if has_comma and has_dot:
        if clean.rfind(",") > clean.rfind("."):
            return clean.replace(".", "").replace(",", ".", 1)
        return clean.replace(",", "")

    if has_comma:
        if clean.count(",") > 1:
            return _collapse_separator(clean, ",")
        return clean.replace(",", ".")

    if has_dot and clean.count(".") > 1:
        return _collapse_separator(clean, ".")

    return clean


def parse_price(raw: Any) -> float:
    """
    Parse a price cell to float.

    Never raises: empty, non-numeric or non-finite values become 0.0 so a
    single bad cell cannot abort a batch import.
    """
    normalized = normalize_number_string(raw)
    match = _FLOAT_PREFIX.match(normalized)
    if match is None:
        return 0.0

    try:
        value = float(match.group(0))
    except ValueError:
        return 0.0

    return value if math.isfinite(value) else 0.0
