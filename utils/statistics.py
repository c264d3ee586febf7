"""
Summary statistics over a batch of processed results.

Every result falls into exactly one PriceAction bucket, so bucket counts
always add up to the batch size.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from models.enums import PriceAction
from models.pricing import ProcessedResult

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 10


@dataclass
class BatchStatistics:
    """Counts, financial impact and a preview sample for one batch."""

    summary: dict[str, int]
    stats: dict[str, float]
    action_counts: dict[PriceAction, int] = field(default_factory=dict)
    sample_results: list[ProcessedResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": dict(self.summary),
            "stats": dict(self.stats),
            "action_counts": {action.value: count for action, count in self.action_counts.items()},
            "sample_results": [result.to_dict() for result in self.sample_results],
        }


def financial_impact(results: Sequence[ProcessedResult]) -> dict[str, float]:
    """Total price increments, drops and net impact over non-error results."""
    deltas = np.array(
        [result.amount_change for result in results if not result.is_error], dtype=float
    )
    total_increment = float(deltas[deltas > 0].sum()) if deltas.size else 0.0
    total_drop = float(np.abs(deltas[deltas < 0]).sum()) if deltas.size else 0.0
    return {
        "total_increment": total_increment,
        "total_drop": total_drop,
        "net_impact": total_increment - total_drop,
    }


def calculate_statistics(
    results: Sequence[ProcessedResult], sample_size: int = DEFAULT_SAMPLE_SIZE
) -> BatchStatistics:
    """Partition results by action and summarize the batch."""
    actions = [result.action for result in results]
    counts = Counter(actions)
    action_counts = {action: counts.get(action, 0) for action in PriceAction}

    stale_increases = sum(
        1
        for result, action in zip(results, actions)
        if action == PriceAction.STALE_NUDGE and result.amount_change > 0
    )
    stale_decreases = action_counts[PriceAction.STALE_NUDGE] - stale_increases

    summary = {
        "total_stocks": len(results),
        "within_strategy": action_counts[PriceAction.WITHIN_STRATEGY],
        "increases": action_counts[PriceAction.INCREASE],
        "decreases": action_counts[PriceAction.DECREASE],
        "stale_nudge_increases": stale_increases,
        "stale_nudge_decreases": stale_decreases,
        "optimized": action_counts[PriceAction.STALE_NUDGE],
        "nudge_blocked": action_counts[PriceAction.NUDGE_BLOCKED],
        "rounded_ok": action_counts[PriceAction.ROUNDED_OK],
        "data_issues": action_counts[PriceAction.DATA_ERROR],
        "total_within_strategy": (
            action_counts[PriceAction.WITHIN_STRATEGY]
            + action_counts[PriceAction.NUDGE_BLOCKED]
            + action_counts[PriceAction.STALE_NUDGE]
        ),
    }
    # Key names used by existing report consumers
    summary.update(
        {
            "increase_within_strategy": summary["stale_nudge_increases"],
            "decrease_within_strategy": summary["stale_nudge_decreases"],
            "not_change": summary["within_strategy"],
            "price_increase": summary["increases"],
            "price_decrease": summary["decreases"],
        }
    )
    stats = financial_impact(results)

    if summary["data_issues"]:
        logger.warning(f"{summary['data_issues']} of {len(results)} records have data errors")

    return BatchStatistics(
        summary=summary,
        stats=stats,
        action_counts=action_counts,
        sample_results=list(results[: max(sample_size, 0)]),
    )
