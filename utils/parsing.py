"""
Lenient parsing of currency-formatted and numeric text fields.
"""

import math
import re
from typing import Any

_CURRENCY_NOISE = re.compile(r"[,£$€\s]")


def parse_amount(raw: Any) -> float | None:
    """
    Parse values such as "£12,345.00", "9,878" or 9878 into a float.

    Returns None for empty, non-numeric or non-finite input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        cleaned = _CURRENCY_NOISE.sub("", str(raw))
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
    if not math.isfinite(value):
        return None
    return value
