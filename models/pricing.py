"""
Pricing data models for the repricing engine.
Includes the InputRecord / ProcessedResult dataclasses, the Resolution result
type used between engine steps, and the reason strings downstream consumers
match on.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Generic, Mapping, TypeVar

from .enums import PriceAction

T = TypeVar("T")

DATA_ERROR_PREFIX = "Data Error"
WITHIN_STRATEGY = "Within strategy"
STALE_NUDGE_PREFIX = "Stale nudge"
INCREASE_PREFIX = "Increase to target"
DECREASE_PREFIX = "Decrease to target"
PRICE_OK_ROUNDED = "Price OK (Rounded)"


def format_number(value: float) -> str:
    """Render a number the way reason strings show it: 98.0 -> '98', 98.78 -> '98.78'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def stale_nudge_reason(days: float) -> str:
    return f"{STALE_NUDGE_PREFIX} ({format_number(days)} days) - {WITHIN_STRATEGY}"


def nudge_blocked_reason(days: float) -> str:
    return f"{WITHIN_STRATEGY} (Stale {format_number(days)} days but nudge fails tolerance)"


def increase_reason(target_percent: float) -> str:
    return f"{INCREASE_PREFIX} ({format_number(target_percent)}%)"


def decrease_reason(target_percent: float) -> str:
    return f"{DECREASE_PREFIX} ({format_number(target_percent)}%)"


def data_error_reason(message: str) -> str:
    return f"{DATA_ERROR_PREFIX}: {message}"


def classify_reason(reason: str) -> PriceAction:
    """Assign a reason string to exactly one PriceAction bucket."""
    if reason.startswith(DATA_ERROR_PREFIX):
        return PriceAction.DATA_ERROR
    if reason.startswith(STALE_NUDGE_PREFIX):
        return PriceAction.STALE_NUDGE
    if reason.startswith(INCREASE_PREFIX):
        return PriceAction.INCREASE
    if reason.startswith(DECREASE_PREFIX):
        return PriceAction.DECREASE
    if reason == WITHIN_STRATEGY:
        return PriceAction.WITHIN_STRATEGY
    if reason.startswith(WITHIN_STRATEGY):
        return PriceAction.NUDGE_BLOCKED
    return PriceAction.ROUNDED_OK


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """
    Outcome of one engine step: either a value or an error message.
    """

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Resolution[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Resolution[T]":
        return cls(error=error)


@dataclass(frozen=True)
class InputRecord:
    """
    One normalized inventory item.

    ``fields`` holds the raw source columns; the reference value is read from
    it by column name.
    """

    stock_id: str
    current_price: float
    age_days: float
    rating_band: Any
    days_since_last_change: int = 0
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessedResult:
    """
    Engine output for one record.
    """

    stock_id: str
    current_price: float
    reference_price: float
    target_percent: float
    target_price: float
    new_price: float
    reason: str
    age_days: float | None = None
    at_rating: Any = None

    @property
    def is_error(self) -> bool:
        return self.reason.startswith(DATA_ERROR_PREFIX)

    @property
    def action(self) -> PriceAction:
        return classify_reason(self.reason)

    @property
    def amount_change(self) -> float:
        return self.new_price - self.current_price

    @classmethod
    def data_error(
        cls,
        message: str,
        stock_id: str,
        current_price: float,
        age_days: float | None = None,
        at_rating: Any = None,
    ) -> "ProcessedResult":
        """Placeholder result for a record that could not be priced."""
        return cls(
            stock_id=stock_id,
            current_price=current_price,
            reference_price=0,
            target_percent=0,
            target_price=0,
            new_price=current_price,
            reason=data_error_reason(message),
            age_days=age_days,
            at_rating=at_rating,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
