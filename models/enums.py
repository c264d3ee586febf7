"""
Centralized Enum definitions for the repricing engine.
"""

from enum import Enum


class ToleranceType(str, Enum):
    """How the "within strategy" tolerance is expressed"""

    PERCENT = "percent"  # Percentage points of reference value
    FIXED = "fixed"  # Currency amount around the target price


class NudgeType(str, Enum):
    """How the stale-price nudge amount is expressed"""

    PERCENT = "percent"
    FIXED = "fixed"


class NudgePreference(str, Enum):
    """Which nudge direction is tried first for stale prices"""

    DROP = "drop"
    ADD = "add"
    AUTO = "auto"  # Same order as DROP


class RoundingMode(str, Enum):
    """Rounding policies applied to the final chosen price"""

    EXACT = "exact"
    CHARM_49_99 = "charm_49_99"
    ENDS_4_9 = "ends_4_9"

    @classmethod
    def parse(cls, value) -> "RoundingMode | None":
        """Map canonical and legacy spellings to a mode, None if unknown."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower() if value is not None else ""
        text = _LEGACY_ROUNDING_ALIASES.get(text, text)
        try:
            return cls(text)
        except ValueError:
            return None


_LEGACY_ROUNDING_ALIASES = {
    "49/99": RoundingMode.CHARM_49_99.value,
    "ends_with_4_9": RoundingMode.ENDS_4_9.value,
}


class PriceAction(str, Enum):
    """Mutually exclusive classification of a processed result"""

    DATA_ERROR = "data_error"
    STALE_NUDGE = "stale_nudge"
    INCREASE = "increase"
    DECREASE = "decrease"
    WITHIN_STRATEGY = "within_strategy"
    NUDGE_BLOCKED = "nudge_blocked"
    ROUNDED_OK = "rounded_ok"
