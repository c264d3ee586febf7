"""
Pricing strategy configuration.

A ``StrategyConfig`` is built once per batch run, validated at construction
time and frozen afterwards. Merging stored defaults with overrides happens
outside this module (see ``config.config``).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .bands import Band, parse_bands
from .enums import NudgeType, RoundingMode, ToleranceType


class StrategyConfigError(ValueError):
    """Raised when a strategy cannot be turned into a usable configuration."""


def find_age_band_issues(bands: list[Band] | tuple[Band, ...]) -> list[str]:
    """
    Check that age bands start at 0, are contiguous, and end open-ended.

    Returns a list of human-readable problems; an empty list means valid.
    """
    if not bands:
        return ["No age bands configured"]

    issues: list[str] = []
    if bands[0].min != 0:
        issues.append(f"First age band '{bands[0].name}' must start at 0")
    for current, following in zip(bands, bands[1:]):
        if current.is_open:
            issues.append(f"Age band '{current.name}' is open-ended but is not the last band")
        elif current.max + 1 != following.min:
            issues.append(
                f"Age bands '{current.name}' and '{following.name}' are not contiguous "
                f"({current.max} + 1 != {following.min})"
            )
    if not bands[-1].is_open:
        issues.append(f"Last age band '{bands[-1].name}' must be open-ended")
    return issues


class StrategyConfig(BaseModel):
    """Immutable pricing strategy used for a whole batch."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "Default Strategy"
    description: str = ""
    reference_column: str = "Retail valuation"
    tolerance_type: ToleranceType = ToleranceType.PERCENT
    tolerance_value: float = Field(0.2, ge=0)
    stale_days: int = Field(7, ge=0)
    nudge_type: NudgeType = NudgeType.PERCENT
    nudge_value: float = Field(0.2, ge=0)
    nudge_preference: str = "drop"
    rounding_mode: str = RoundingMode.EXACT.value
    weekend_hold: bool = False  # Stored with the strategy, not applied by the engine
    age_bands: tuple[Band, ...]
    rating_bands: tuple[Band, ...]
    target_matrix: dict[str, dict[str, float]]

    @field_validator("age_bands", "rating_bands", mode="before")
    @classmethod
    def normalize_bands(cls, value: Any) -> tuple[Band, ...]:
        if value is None:
            return ()
        return tuple(parse_bands(value))

    @field_validator("nudge_preference", mode="before")
    @classmethod
    def normalize_nudge_preference(cls, value: Any) -> str:
        return str(value or "drop").strip().lower()

    @field_validator("rounding_mode", mode="before")
    @classmethod
    def normalize_rounding_mode(cls, value: Any) -> str:
        mode = RoundingMode.parse(value)
        # Unknown modes are kept as-is; rounding treats them as identity
        return mode.value if mode is not None else str(value)

    @model_validator(mode="after")
    def check_bands(self):
        issues = find_age_band_issues(self.age_bands)
        if not self.rating_bands:
            issues.append("No rating bands configured")
        if issues:
            raise ValueError("; ".join(issues))
        return self

    def matrix_gaps(self) -> list[tuple[str, str]]:
        """(age band, rating band) pairs with no target matrix entry."""
        gaps = []
        for age_band in self.age_bands:
            row = self.target_matrix.get(age_band.name, {})
            for rating_band in self.rating_bands:
                if rating_band.name not in row:
                    gaps.append((age_band.name, rating_band.name))
        return gaps

    def to_dict(self) -> dict[str, Any]:
        """Plain representation suitable for storing or re-validating."""
        data = self.model_dump(mode="json", exclude={"age_bands", "rating_bands"})
        data["age_bands"] = [band.to_dict() for band in self.age_bands]
        data["rating_bands"] = [band.to_dict() for band in self.rating_bands]
        return data
