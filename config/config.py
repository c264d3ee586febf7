"""
Configuration for the repricing engine.
Defines runtime settings, the base pricing strategy, and the defaults +
overrides merge that produces a validated StrategyConfig.
"""

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from models.strategy import StrategyConfig, StrategyConfigError
from utils.env import env_int, env_str, load_project_dotenv

logger = logging.getLogger(__name__)


@dataclass
class RepricingSettings:
    sample_size: int = 10  # Results kept for preview in batch statistics
    max_workers: int | None = None  # None or 1 = price records sequentially
    log_level: str = "INFO"
    default_strategy_path: str | None = None  # JSON strategy overriding DEFAULT_STRATEGY


def load_settings() -> RepricingSettings:
    """Build settings from the environment (after loading the project .env)."""
    load_project_dotenv()
    defaults = RepricingSettings()
    return RepricingSettings(
        sample_size=env_int("REPRICING_SAMPLE_SIZE", defaults.sample_size),
        max_workers=env_int("REPRICING_MAX_WORKERS", defaults.max_workers),
        log_level=env_str("REPRICING_LOG_LEVEL", defaults.log_level),
        default_strategy_path=env_str("REPRICING_STRATEGY_PATH", defaults.default_strategy_path),
    )


DEFAULT_STRATEGY: dict[str, Any] = {
    "name": "Default Strategy",
    "description": "Target a percentage of retail valuation by stock age and retail rating.",
    "reference_column": "Retail valuation",
    "tolerance_type": "percent",
    "tolerance_value": 0.2,
    "stale_days": 7,
    "nudge_type": "percent",
    "nudge_value": 0.2,
    "nudge_preference": "add",
    "rounding_mode": "49/99",
    "weekend_hold": False,
    "age_bands": [
        {"name": "0-15", "min": 0, "max": 15},
        {"name": "16-30", "min": 16, "max": 30},
        {"name": "31-60", "min": 31, "max": 60},
        {"name": "61-90", "min": 61, "max": 90},
        {"name": "91-179", "min": 91, "max": 179},
        {"name": "180+", "min": 180},
    ],
    "rating_bands": [
        {"name": "Below 40", "min": 0, "max": 39},
        {"name": "40-59", "min": 40, "max": 59},
        {"name": "60-77", "min": 60, "max": 77},
        {"name": "78+", "min": 78},
    ],
    "target_matrix": {
        "0-15": {"Below 40": 95.5, "40-59": 96.5, "60-77": 97.78, "78+": 98.78},
        "16-30": {"Below 40": 94.5, "40-59": 95.5, "60-77": 96.78, "78+": 97.78},
        "31-60": {"Below 40": 93.0, "40-59": 94.0, "60-77": 95.25, "78+": 96.25},
        "61-90": {"Below 40": 91.5, "40-59": 92.5, "60-77": 93.5, "78+": 94.5},
        "91-179": {"Below 40": 89.0, "40-59": 90.0, "60-77": 91.0, "78+": 92.0},
        "180+": {"Below 40": 86.0, "40-59": 87.0, "60-77": 88.0, "78+": 89.0},
    },
}


def merge_strategy_overrides(
    base: dict[str, Any], overrides: dict[str, Any] | None
) -> dict[str, Any]:
    """
    Return a new strategy dict with ``overrides`` applied on top of ``base``.

    Nested dicts (the target matrix) are merged key by key; lists such as
    band definitions are replaced wholesale. Neither input is modified.
    """
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_strategy_overrides(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_strategy_config(
    overrides: dict[str, Any] | None = None,
    base: dict[str, Any] | None = None,
) -> StrategyConfig:
    """Merge overrides onto the base strategy and validate the result."""
    data = merge_strategy_overrides(base if base is not None else DEFAULT_STRATEGY, overrides)
    try:
        config = StrategyConfig.model_validate(data)
    except ValidationError as e:
        raise StrategyConfigError(f"Invalid strategy '{data.get('name', '?')}': {e}") from e
    gaps = config.matrix_gaps()
    if gaps:
        logger.warning(f"Strategy '{config.name}' has {len(gaps)} empty target matrix cells")
    return config


def load_strategy_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON strategy document (a single strategy or a one-element list)."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        if not data:
            raise StrategyConfigError(f"Strategy file {path} is empty")
        data = data[0]
    if not isinstance(data, dict):
        raise StrategyConfigError(f"Strategy file {path} does not contain a strategy object")
    return data
