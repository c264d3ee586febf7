"""
Price rounding strategies.

All functions are pure; tie-breaks are "first candidate seen wins", with
candidates generated in ascending order.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from models.enums import RoundingMode

CHARM_ENDINGS = (25, 49, 75, 99)
ENDS_4_9_SEARCH_RADIUS = 10


def round_half_up(value: float, places: int = 0) -> float:
    """Half-up rounding (2.5 -> 3, 2.345 -> 2.35 at 2 places)."""
    quantum = Decimal(1).scaleb(-places)
    try:
        return float(Decimal(str(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Value exceeds the decimal context precision
        return float(value)


def round_exact(price: float) -> float:
    return round_half_up(price, 2)


def round_charm_49_99(price: float) -> float:
    century = math.floor(price / 100) * 100
    candidates = [
        base + ending
        for base in (century - 100, century, century + 100)
        for ending in CHARM_ENDINGS
        if base + ending > 0
    ]
    if not candidates:
        return round_half_up(price)
    return min(candidates, key=lambda candidate: abs(candidate - price))


def round_ends_4_9(price: float) -> float:
    center = int(round_half_up(price))
    candidates = [
        value
        for value in range(center - ENDS_4_9_SEARCH_RADIUS, center + ENDS_4_9_SEARCH_RADIUS + 1)
        if value >= 0 and str(value)[-1] in ("4", "9")
    ]
    if not candidates:
        return center
    return min(candidates, key=lambda candidate: abs(candidate - center))


_ROUNDERS = {
    RoundingMode.EXACT: round_exact,
    RoundingMode.CHARM_49_99: round_charm_49_99,
    RoundingMode.ENDS_4_9: round_ends_4_9,
}


def round_price(raw_price: float, mode: RoundingMode | str | None) -> float:
    """Apply a rounding mode; unknown modes leave the price unchanged."""
    rounding_mode = RoundingMode.parse(mode)
    if rounding_mode is None:
        return raw_price
    return _ROUNDERS[rounding_mode](raw_price)
