"""
Batch processing: prices every record of a batch against one strategy and
summarizes the outcome.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable

from agents.pricing_engine import StrategyDecisionEngine
from models.pricing import InputRecord, ProcessedResult
from models.strategy import StrategyConfig
from utils.statistics import DEFAULT_SAMPLE_SIZE, BatchStatistics, calculate_statistics

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Results of one batch run, in input order, plus derived statistics."""

    results: list[ProcessedResult]
    statistics: BatchStatistics
    config_warnings: list[str] = field(default_factory=list)

    @property
    def summary(self) -> dict[str, int]:
        return self.statistics.summary

    @property
    def stats(self) -> dict[str, float]:
        return self.statistics.stats

    @property
    def sample_results(self) -> list[ProcessedResult]:
        return self.statistics.sample_results

    @property
    def valid_results(self) -> list[ProcessedResult]:
        return [result for result in self.results if not result.is_error]

    @property
    def invalid_results(self) -> list[ProcessedResult]:
        return [result for result in self.results if result.is_error]

    def to_dict(self) -> dict[str, Any]:
        data = self.statistics.to_dict()
        data["results"] = [result.to_dict() for result in self.results]
        data["config_warnings"] = list(self.config_warnings)
        return data


def _config_warnings(config: StrategyConfig) -> list[str]:
    warnings = []
    for age_band, rating_band in config.matrix_gaps():
        message = f"Target matrix has no entry for age band '{age_band}' and rating band '{rating_band}'"
        logger.warning(message)
        warnings.append(message)
    return warnings


def process_batch(
    records: Iterable[InputRecord | ProcessedResult],
    config: StrategyConfig,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    max_workers: int | None = None,
) -> BatchReport:
    """
    Price every record against ``config``, keeping input order.

    Items that are already ProcessedResult values (rows the normalization
    adapter rejected) are passed through untouched so the output has one
    entry per input. With ``max_workers`` > 1 records are priced on a
    thread pool; ordering is unchanged.
    """
    items = list(records)
    engine = StrategyDecisionEngine(config)
    warnings = _config_warnings(config)

    def price(item: InputRecord | ProcessedResult) -> ProcessedResult:
        if isinstance(item, ProcessedResult):
            return item
        return engine.decide(item)

    logger.info(f"Processing {len(items)} records with strategy '{config.name}'")
    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(price, items))
    else:
        results = [price(item) for item in items]

    statistics = calculate_statistics(results, sample_size=sample_size)
    logger.info(
        f"Processed {len(results)} records: "
        f"{statistics.summary['increases']} increases, "
        f"{statistics.summary['decreases']} decreases, "
        f"{statistics.summary['optimized']} stale nudges, "
        f"{statistics.summary['data_issues']} data issues"
    )
    return BatchReport(results=results, statistics=statistics, config_warnings=warnings)
