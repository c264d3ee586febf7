"""
Module: connectors.strategy_store

In-memory key-value store for pricing strategies, seeded with the default
strategy. Strategies are stored as plain dicts and only turned into a
validated StrategyConfig when a batch is about to run.
"""

import copy
import logging
from typing import Any

from config.config import DEFAULT_STRATEGY, build_strategy_config
from models.strategy import StrategyConfig

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY_ID = "default"


class StrategyNotFoundError(KeyError):
    """No strategy is stored under the requested name."""


class ProtectedStrategyError(ValueError):
    """The default strategy cannot be deleted."""


class TargetMatrixError(ValueError):
    """A submitted target matrix has a missing or non-numeric cell."""


def validate_target_matrix(matrix: dict[str, dict[str, Any]]) -> dict[str, dict[str, float]]:
    """Check every cell is filled with a number; returns the matrix with float cells."""
    if not matrix:
        raise TargetMatrixError("targetMatrix is required")
    validated: dict[str, dict[str, float]] = {}
    for age_band, ratings in matrix.items():
        validated[age_band] = {}
        for rating_band, value in ratings.items():
            if value is None or value == "":
                raise TargetMatrixError(
                    f'Missing value for age band "{age_band}" and rating band "{rating_band}"'
                )
            try:
                validated[age_band][rating_band] = float(value)
            except (TypeError, ValueError):
                raise TargetMatrixError(
                    f'Invalid value for age band "{age_band}" and rating band "{rating_band}". '
                    "Must be a number."
                ) from None
    return validated


class InMemoryStrategyStore:
    """
    Stores strategies by name. The default strategy is always present.
    """

    def __init__(self, default_strategy: dict[str, Any] | None = None):
        default = copy.deepcopy(default_strategy or DEFAULT_STRATEGY)
        default["id"] = DEFAULT_STRATEGY_ID
        self._strategies: dict[str, dict[str, Any]] = {DEFAULT_STRATEGY_ID: default}

    def list_strategies(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(strategy) for strategy in self._strategies.values()]

    def get(self, strategy_id: str) -> dict[str, Any]:
        if strategy_id not in self._strategies:
            raise StrategyNotFoundError(f"Configuration not found: {strategy_id}")
        return copy.deepcopy(self._strategies[strategy_id])

    def save(self, strategy: dict[str, Any]) -> dict[str, Any]:
        """Save or replace a strategy, keyed by its name."""
        name = strategy.get("name")
        if not name:
            raise ValueError("Strategy name is required")
        stored = copy.deepcopy(strategy)
        stored["id"] = name
        self._strategies[name] = stored
        logger.info(f"Saved strategy '{name}'")
        return copy.deepcopy(stored)

    def delete(self, strategy_id: str) -> None:
        if strategy_id == DEFAULT_STRATEGY_ID:
            raise ProtectedStrategyError("Cannot delete default configuration")
        if self._strategies.pop(strategy_id, None) is None:
            raise StrategyNotFoundError(f"Configuration not found: {strategy_id}")
        logger.info(f"Deleted strategy '{strategy_id}'")

    def get_target_matrix(self, strategy_id: str = DEFAULT_STRATEGY_ID) -> dict[str, Any]:
        strategy = self.get(strategy_id)
        return {
            "age_bands": strategy.get("age_bands", []),
            "rating_bands": strategy.get("rating_bands", []),
            "target_matrix": strategy.get("target_matrix", {}),
        }

    def update_target_matrix(
        self, strategy_id: str, matrix: dict[str, dict[str, Any]]
    ) -> dict[str, Any]:
        if strategy_id not in self._strategies:
            raise StrategyNotFoundError(f"Configuration not found: {strategy_id}")
        self._strategies[strategy_id]["target_matrix"] = validate_target_matrix(matrix)
        logger.info(f"Updated target matrix for strategy '{strategy_id}'")
        return self.get(strategy_id)

    def build_config(self, strategy_id: str = DEFAULT_STRATEGY_ID) -> StrategyConfig:
        """Validated, frozen configuration for a stored strategy."""
        strategy = self.get(strategy_id)
        strategy.pop("id", None)
        return build_strategy_config(strategy, base={})
