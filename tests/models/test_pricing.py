import pytest

from models.enums import PriceAction
from models.pricing import (
    ProcessedResult,
    Resolution,
    classify_reason,
    decrease_reason,
    format_number,
    increase_reason,
    nudge_blocked_reason,
    stale_nudge_reason,
)


@pytest.mark.parametrize(
    "value, expected",
    [(98.78, "98.78"), (98.0, "98"), (10, "10"), (0.0, "0"), (97.5, "97.5")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_reason_strings():
    assert increase_reason(98.78) == "Increase to target (98.78%)"
    assert decrease_reason(97.0) == "Decrease to target (97%)"
    assert stale_nudge_reason(10) == "Stale nudge (10 days) - Within strategy"
    assert nudge_blocked_reason(12) == "Within strategy (Stale 12 days but nudge fails tolerance)"


@pytest.mark.parametrize(
    "reason, expected",
    [
        ("Data Error: Reference column 'x' not found in CSV", PriceAction.DATA_ERROR),
        ("Stale nudge (10 days) - Within strategy", PriceAction.STALE_NUDGE),
        ("Increase to target (98.78%)", PriceAction.INCREASE),
        ("Decrease to target (98.78%)", PriceAction.DECREASE),
        ("Within strategy", PriceAction.WITHIN_STRATEGY),
        ("Within strategy (Stale 9 days but nudge fails tolerance)", PriceAction.NUDGE_BLOCKED),
        ("Price OK (Rounded)", PriceAction.ROUNDED_OK),
    ]
)
def test_classify_reason(reason, expected):
    assert classify_reason(reason) == expected


def test_data_error_result_zeroes_economics():
    result = ProcessedResult.data_error(
        "Age band '91+' not found in target matrix",
        stock_id="AB12CDE",
        current_price=9878.0,
        age_days=120,
        at_rating=85,
    )
    assert result.reason == "Data Error: Age band '91+' not found in target matrix"
    assert result.is_error
    assert result.reference_price == 0
    assert result.target_percent == 0
    assert result.target_price == 0
    assert result.new_price == 9878.0
    assert result.amount_change == 0
    assert result.age_days == 120
    assert result.at_rating == 85


def test_resolution_success_and_failure():
    ok = Resolution.success(10.0)
    failed = Resolution.failure("missing")
    assert ok.ok and ok.value == 10.0 and ok.error is None
    assert not failed.ok and failed.value is None and failed.error == "missing"
