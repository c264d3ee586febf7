"""
Band value type shared by age and rating bands.

Strategies have historically stored bands in two shapes:
- object form: ``{"name": "0-15", "min": 0, "max": 15}``
- compact string form: ``"0-15"`` (inclusive range) or ``"180+"`` (open-ended)

Both are normalized here into a single canonical ``Band`` before any resolver
runs, so the resolvers never look at the stored format.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

_OPEN_BAND = re.compile(r"^\s*(\d+)\s*\+\s*$")
_RANGE_BAND = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


@dataclass(frozen=True)
class Band:
    """
    A named, inclusive numeric range. ``max=None`` means the band is open-ended.
    """

    name: str
    min: float = 0
    max: float | None = None

    @property
    def is_open(self) -> bool:
        return self.max is None

    def upper(self, ceiling: float = math.inf) -> float:
        """Upper bound, substituting ``ceiling`` for an open band."""
        return ceiling if self.max is None else self.max

    def contains(self, value: float, ceiling: float = math.inf) -> bool:
        return self.min <= value <= self.upper(ceiling)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "min": self.min}
        if self.max is not None:
            data["max"] = self.max
        return data


def _parse_legacy_string(text: str) -> Band | None:
    # "180+" is checked before "A-B", matching the stored legacy format
    open_match = _OPEN_BAND.match(text)
    if open_match:
        return Band(name=text, min=int(open_match.group(1)), max=None)
    range_match = _RANGE_BAND.match(text)
    if range_match:
        return Band(
            name=text,
            min=int(range_match.group(1)),
            max=int(range_match.group(2)),
        )
    return None


def parse_band(raw: Any) -> Band | None:
    """
    Convert one stored band into a ``Band``.

    Returns None for entries that cannot be interpreted (a malformed legacy
    string, an object with no name, or non-numeric bounds).
    """
    if isinstance(raw, Band):
        return raw
    if isinstance(raw, str):
        return _parse_legacy_string(raw)
    if isinstance(raw, dict):
        name = raw.get("name")
        if not name:
            return None
        try:
            lower = raw.get("min")
            upper = raw.get("max")
            return Band(
                name=str(name),
                min=0 if lower is None or lower == "" else float(lower),
                max=None if upper is None or upper == "" else float(upper),
            )
        except (TypeError, ValueError):
            return None
    return None


def parse_bands(raw_bands: Iterable[Any] | None) -> list[Band]:
    """
    Normalize a stored band list, silently skipping entries that do not parse.

    This is the tolerant behavior legacy strategies rely on; strict checks
    (contiguity etc.) live in ``models.strategy``.
    """
    bands: list[Band] = []
    for raw in raw_bands or []:
        band = parse_band(raw)
        if band is None:
            logger.debug(f"Skipping unparseable band definition: {raw!r}")
            continue
        bands.append(band)
    return bands
