import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path to allow `import agents`, `import models`, etc.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from models.pricing import InputRecord  # noqa: E402
from models.strategy import StrategyConfig  # noqa: E402


@pytest.fixture
def strategy_data() -> dict:
    """A small strategy using legacy string age bands and object rating bands."""
    return {
        "name": "Test Strategy",
        "reference_column": "Retail valuation",
        "tolerance_type": "percent",
        "tolerance_value": 2,
        "stale_days": 7,
        "nudge_type": "percent",
        "nudge_value": 1,
        "nudge_preference": "drop",
        "rounding_mode": "exact",
        "age_bands": ["0-15", "16-30", "31-90", "91+"],
        "rating_bands": [
            {"name": "Below 78", "min": 0, "max": 77},
            {"name": "78+", "min": 78},
        ],
        "target_matrix": {
            "0-15": {"Below 78": 96.5, "78+": 98.78},
            "16-30": {"Below 78": 95.5, "78+": 97.0},
            "31-90": {"Below 78": 93.0, "78+": 95.0},
            "91+": {"Below 78": 90.0, "78+": 92.0},
        },
    }


@pytest.fixture
def make_config(strategy_data):
    """Builds a StrategyConfig from the test strategy with field overrides."""

    def _make(**overrides) -> StrategyConfig:
        return StrategyConfig.model_validate({**strategy_data, **overrides})

    return _make


@pytest.fixture
def config(make_config) -> StrategyConfig:
    return make_config()


@pytest.fixture
def make_record():
    """Builds an InputRecord valued at 10,000 (age 10, rating 85) with overrides."""

    def _make(**overrides) -> InputRecord:
        values = {
            "stock_id": "AB12CDE",
            "current_price": 9878.0,
            "age_days": 10,
            "rating_band": 85,
            "days_since_last_change": 0,
            "fields": {"Retail valuation": "£10,000"},
        }
        values.update(overrides)
        return InputRecord(**values)

    return _make
