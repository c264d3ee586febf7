"""
Strategy decision engine: computes the target price for an inventory item and
decides whether to hold, nudge or move the price to target.

The engine is a total function over records: every failure is reported as a
"Data Error: ..." result, nothing is raised to the caller.
"""

import logging
import math

from agents.band_resolvers import resolve_age_band, resolve_rating_band
from agents.rounding import round_price
from models.enums import NudgePreference, NudgeType, ToleranceType
from models.pricing import (
    WITHIN_STRATEGY,
    PRICE_OK_ROUNDED,
    InputRecord,
    ProcessedResult,
    Resolution,
    decrease_reason,
    increase_reason,
    nudge_blocked_reason,
    stale_nudge_reason,
)
from models.strategy import StrategyConfig
from utils.parsing import parse_amount

logger = logging.getLogger(__name__)

# Columns tried, in order, after the strategy's own reference column
REFERENCE_COLUMN_ALIASES = ("Retail valuation", "benchmark_price")

# Float noise allowed when comparing a price distance to the tolerance
TOLERANCE_EPSILON = 1e-6


def _within(distance: float, tolerance: float) -> bool:
    return distance <= tolerance or math.isclose(distance, tolerance, abs_tol=TOLERANCE_EPSILON)


def lookup_target_percent(
    target_matrix: dict[str, dict[str, float]],
    age_band: str | None,
    rating_band: str | None,
    raw_rating,
) -> Resolution[float]:
    """Find the target percentage for an (age band, rating band) cell."""
    if age_band is None:
        return Resolution.failure("No age bands configured")
    row = target_matrix.get(age_band)
    if row is None:
        return Resolution.failure(f"Age band '{age_band}' not found in target matrix")
    if rating_band is None or row.get(rating_band) is None:
        return Resolution.failure(f"Rating '{raw_rating}' not found in matrix for {age_band}")
    return Resolution.success(float(row[rating_band]))


class StrategyDecisionEngine:
    """
    Applies one StrategyConfig to individual records.
    """

    def __init__(self, config: StrategyConfig):
        self.config = config

    def resolve_reference_value(self, record: InputRecord) -> Resolution[float]:
        """First usable (positive, numeric) value among the reference column and its aliases."""
        column = self.config.reference_column
        candidates = [column] + [alias for alias in REFERENCE_COLUMN_ALIASES if alias != column]
        for name in candidates:
            value = parse_amount(record.fields.get(name))
            if value is not None and value > 0:
                return Resolution.success(value)
        return Resolution.failure(f"Reference column '{column}' not found in CSV")

    def resolve_target_percent(self, record: InputRecord) -> Resolution[float]:
        age_band = resolve_age_band(record.age_days, self.config.age_bands)
        rating_band = resolve_rating_band(record.rating_band, self.config.rating_bands)
        return lookup_target_percent(
            self.config.target_matrix, age_band, rating_band, record.rating_band
        )

    def is_within_strategy(
        self, price: float, reference_value: float, target_percent: float
    ) -> bool:
        tolerance = self.config.tolerance_value
        if self.config.tolerance_type == ToleranceType.PERCENT:
            current_percent = price / reference_value * 100
            return _within(abs(current_percent - target_percent), tolerance)
        target_price = reference_value * target_percent / 100
        return _within(abs(price - target_price), tolerance)

    def tolerance_limits(
        self, reference_value: float, target_percent: float, target_price: float
    ) -> tuple[float, float]:
        """Lowest and highest price still considered within strategy."""
        tolerance = self.config.tolerance_value
        if self.config.tolerance_type == ToleranceType.PERCENT:
            return (
                reference_value * ((target_percent - tolerance) / 100),
                reference_value * ((target_percent + tolerance) / 100),
            )
        return target_price - tolerance, target_price + tolerance

    def nudge_amount(self, reference_value: float) -> float:
        if self.config.nudge_type == NudgeType.PERCENT:
            return reference_value * (self.config.nudge_value / 100)
        return self.config.nudge_value

    def choose_nudge(
        self, current_price: float, amount: float, lower: float, upper: float
    ) -> float | None:
        """Pick the nudged price allowed by the preference, or None if neither fits."""
        drop = current_price - amount
        add = current_price + amount
        valid_drop = drop if lower <= drop <= upper else None
        valid_add = add if lower <= add <= upper else None

        if self.config.nudge_preference == NudgePreference.ADD.value:
            return valid_add if valid_add is not None else valid_drop
        # "drop", "auto" and anything unrecognized try a drop first
        return valid_drop if valid_drop is not None else valid_add

    def decide(self, record: InputRecord) -> ProcessedResult:
        try:
            return self._decide(record)
        except Exception as e:
            logger.error(
                f"Unexpected error pricing stock {getattr(record, 'stock_id', None)}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
            return self._error_result(record, str(e))

    def _error_result(self, record: InputRecord, message: str) -> ProcessedResult:
        return ProcessedResult.data_error(
            message,
            stock_id=getattr(record, "stock_id", None),
            current_price=getattr(record, "current_price", 0),
            age_days=getattr(record, "age_days", None),
            at_rating=getattr(record, "rating_band", None),
        )

    def _decide(self, record: InputRecord) -> ProcessedResult:
        reference = self.resolve_reference_value(record)
        if not reference.ok:
            return self._error_result(record, reference.error)
        target = self.resolve_target_percent(record)
        if not target.ok:
            return self._error_result(record, target.error)

        reference_value = reference.value
        target_percent = target.value
        target_price = reference_value * (target_percent / 100)
        current_price = record.current_price

        if self.is_within_strategy(current_price, reference_value, target_percent):
            new_price, reason = self._hold_or_nudge(
                record, reference_value, target_percent, target_price
            )
        else:
            new_price = round_price(target_price, self.config.rounding_mode)
            if new_price > current_price:
                reason = increase_reason(target_percent)
            elif new_price < current_price:
                reason = decrease_reason(target_percent)
            else:
                reason = PRICE_OK_ROUNDED

        logger.debug(f"{record.stock_id}: {current_price} -> {new_price} ({reason})")
        return ProcessedResult(
            stock_id=record.stock_id,
            current_price=current_price,
            reference_price=reference_value,
            target_percent=target_percent,
            target_price=target_price,
            new_price=new_price,
            reason=reason,
            age_days=record.age_days,
            at_rating=record.rating_band,
        )

    def _hold_or_nudge(
        self,
        record: InputRecord,
        reference_value: float,
        target_percent: float,
        target_price: float,
    ) -> tuple[float, str]:
        days = record.days_since_last_change
        if days < self.config.stale_days:
            return record.current_price, WITHIN_STRATEGY

        lower, upper = self.tolerance_limits(reference_value, target_percent, target_price)
        nudged = self.choose_nudge(
            record.current_price, self.nudge_amount(reference_value), lower, upper
        )
        if nudged is None:
            return record.current_price, nudge_blocked_reason(days)
        return round_price(nudged, self.config.rounding_mode), stale_nudge_reason(days)


def decide(record: InputRecord, config: StrategyConfig) -> ProcessedResult:
    """Price a single record against a strategy."""
    return StrategyDecisionEngine(config).decide(record)
