"""
Defensive numeric parsing for display-formatted spreadsheet values.

Benchmark cells arrive as strings such as ``"1,234"``, ``"12.5%"`` or
``" 3.2 "``.  Every helper here is total: malformed input resolves to ``0.0``
and nothing is ever raised.
"""

from __future__ import annotations

import math
import re
from typing import Any

# Leading signed decimal, optional exponent.  Anything after it is ignored
# ("12.5%" -> 12.5, "3.2 yrs" -> 3.2); no leading number -> 0.
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_metric(value: Any) -> float:
    """Parse a numeric cell into a float.

    Accepts already-typed numbers (returned as float, NaN/inf → 0) and
    strings with thousands separators, surrounding whitespace and trailing
    units such as ``%``.

    Examples::

        parse_metric("")        -> 0.0
        parse_metric("abc")     -> 0.0
        parse_metric("1,234")   -> 1234.0
        parse_metric("12.5%")   -> 12.5
        parse_metric(None)      -> 0.0

    Args:
        value: Raw cell value (str, int, float or None).

    Returns:
        Parsed finite float, or ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    text = str(value).replace(",", "").strip()
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return 0.0

    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_percentage(value: Any) -> float:
    """Parse a percentage cell (``"40%"``, ``"40"`` or ``40``) into ``40.0``."""
    if isinstance(value, str):
        value = value.replace("%", "")
    return parse_metric(value)
