"""
Age-band and rating-band resolution for the repricing engine.

Both resolvers scan bands in configured order and never raise: when nothing
matches they defer to an explicit fallback policy.
"""

import logging
import math
import re
from typing import Any, Sequence

from models.bands import Band

logger = logging.getLogger(__name__)

# Upper bound used for rating bands stored without a max
RATING_SCORE_CEILING = 999

_LEADING_INT = re.compile(r"^[+-]?\d+")


def fallback_age_band(bands: Sequence[Band]) -> str | None:
    """Anything past every explicit range falls into the last (oldest) band."""
    if not bands:
        return None
    return bands[-1].name


def fallback_rating_band(bands: Sequence[Band]) -> str | None:
    """The highest configured band: greatest min, first one on ties."""
    if not bands:
        return None
    highest = bands[0]
    for band in bands[1:]:
        if band.min > highest.min:
            highest = band
    return highest.name


def resolve_age_band(age_days: float, bands: Sequence[Band]) -> str | None:
    """
    Return the name of the first band containing ``age_days``.

    Falls back to the last configured band when no band matches (negative
    ages, fractional ages between integer bands, gaps in a legacy config).
    Returns None only when no bands are configured.
    """
    for band in bands:
        if band.contains(age_days, ceiling=math.inf):
            return band.name
    fallback = fallback_age_band(bands)
    logger.debug(f"Age {age_days} matched no band, using fallback '{fallback}'")
    return fallback


def _as_text(raw_value: Any) -> str:
    if isinstance(raw_value, float) and raw_value.is_integer():
        return str(int(raw_value))
    return str(raw_value).strip()


def parse_rating_score(raw_value: Any) -> int | None:
    """Leading integer of a rating value with any '%' removed ('85%' -> 85, '85.7' -> 85)."""
    match = _LEADING_INT.match(_as_text(raw_value).replace("%", "").strip())
    if not match:
        return None
    return int(match.group(0))


def resolve_rating_band(raw_value: Any, bands: Sequence[Band]) -> str | None:
    """
    Resolve a raw rating (a band label or a numeric score) to a band name.

    1. A value equal to a band name is passed through.
    2. Otherwise the value is read as an integer score and matched against
       each band's [min, max] range.
    3. Otherwise the highest configured band is used.
    """
    text = _as_text(raw_value)
    for band in bands:
        if text == band.name:
            return band.name

    score = parse_rating_score(raw_value)
    if score is not None:
        for band in bands:
            if band.contains(score, ceiling=RATING_SCORE_CEILING):
                return band.name

    fallback = fallback_rating_band(bands)
    logger.debug(f"Rating {raw_value!r} matched no band, using fallback '{fallback}'")
    return fallback
