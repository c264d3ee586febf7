"""
Module: connectors.csv_export

Writes processed results as delimited text with a fixed column order.
"""

from pathlib import Path
from typing import Sequence

import pandas as pd

from agents.rounding import round_half_up
from models.pricing import ProcessedResult, format_number

EXPORT_COLUMNS = [
    "stock_id",
    "current_price",
    "reference_price",
    "target_percent",
    "target_price",
    "new_price",
    "amount_change",
    "age_days",
    "rating",
    "reason",
]


def _whole(value: float | None) -> int:
    return int(round_half_up(value or 0))


def _optional(value) -> str:
    if value is None or value == "" or value == 0:
        return ""
    return format_number(value)


def export_row(result: ProcessedResult) -> dict[str, object]:
    if result.is_error:
        # Rejected rows only carry what the adapter could read
        row: dict[str, object] = {column: "" for column in EXPORT_COLUMNS}
        row["stock_id"] = result.stock_id or "MISSING"
        row["current_price"] = _optional(result.current_price)
        row["reason"] = result.reason
        return row
    return {
        "stock_id": result.stock_id,
        "current_price": _whole(result.current_price),
        "reference_price": _whole(result.reference_price),
        "target_percent": f"{result.target_percent:.2f}%",
        "target_price": _whole(result.target_price),
        "new_price": _whole(result.new_price),
        "amount_change": _whole(result.amount_change),
        "age_days": _optional(result.age_days),
        "rating": _optional(result.at_rating),
        "reason": result.reason or "Unknown",
    }


def results_to_frame(results: Sequence[ProcessedResult]) -> pd.DataFrame:
    return pd.DataFrame([export_row(result) for result in results], columns=EXPORT_COLUMNS)


def export_results_csv(
    results: Sequence[ProcessedResult], path: str | Path | None = None
) -> str:
    """Render results as CSV text, also writing it to ``path`` when given."""
    csv_text = results_to_frame(results).to_csv(index=False, lineterminator="\n")
    if path is not None:
        Path(path).write_text(csv_text, encoding="utf-8")
    return csv_text
