"""
Tolerant numeric parsing shared by every record field parser.

Accepts surrounding whitespace, an optional sign, decimal and scientific
notation. Integers are truncated toward zero ("4.9" -> 4, "-1.5" -> -1).
Anything else (empty, "abc", "nan", "inf", "1_000") is a parse failure and
yields the caller's default.
"""

import math
import re
from typing import Optional

_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parse_float(text: Optional[str], default: Optional[float] = None) -> Optional[float]:
    """
    Parse a finite float, returning ``default`` on failure.

    Args:
        text: Raw field text (may be None)
        default: Value returned when the text is not a number

    Returns:
        Parsed float or default
    """
    if text is None:
        return default

    text = text.strip()
    if not _NUMBER_RE.fullmatch(text):
        return default

    value = float(text)
    if not math.isfinite(value):
        # "1e999" overflows to inf
        return default
    return value


def parse_int(text: Optional[str], default: Optional[int] = None) -> Optional[int]:
    """
    Parse an integer, truncating decimal/scientific input toward zero.

    Args:
        text: Raw field text (may be None)
        default: Value returned when the text is not a number

    Returns:
        Parsed int or default
    """
    if text is None:
        return default

    stripped = text.strip()
    if _INT_RE.fullmatch(stripped):
        return int(stripped)

    value = parse_float(stripped)
    if value is None:
        return default
    return int(value)
