"""
Module: connectors.csv_source

Record-normalization adapter: reads stock exports (dealer management system
or marketplace CSVs with varying headers) and turns each row into an
InputRecord the pricing engine can consume. Rows that cannot be priced are
returned as "Data Error" results instead, in their original position.
"""

import logging
from pathlib import Path
from typing import IO, Any, Iterable, Mapping

import pandas as pd

from models.pricing import InputRecord, ProcessedResult
from utils.parsing import parse_amount

logger = logging.getLogger(__name__)

STOCK_ID_COLUMNS = ("VRM", "stock_id", "Stock ID", "SKU", "ID", "id")
PRICE_COLUMNS = ("Retail price", "current_price", "Current Price", "Price")
AGE_COLUMNS = ("Days in stock", "Mileage", "age_days", "age", "Age Days", "Age")
RATING_COLUMNS = ("Auto Trader Retail Rating", "rating", "Rating", "at_rating")
PERFORMANCE_SCORE_COLUMN = "Performance rating score"
PERFORMANCE_TEXT_COLUMN = "Performance rating"
DAYS_SINCE_CHANGE_COLUMN = "Days since last price change"

MISSING_STOCK_ID = "MISSING"


def _first_present(row: Mapping[str, Any], columns: Iterable[str]) -> Any:
    for column in columns:
        value = row.get(column)
        if value is not None and str(value).strip() != "":
            return value
    return None


def _tidy_number(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


def _rating_from_text(text: str) -> int:
    text = text.strip().lower()
    if "below average" in text:
        return 45
    if "low" in text or text == "poor":
        return 25
    if "average" in text and "above" not in text:
        return 50
    if "above average" in text:
        return 70
    if "high" in text or "excellent" in text:
        return 90
    return 0


def extract_rating(row: Mapping[str, Any]) -> Any:
    """
    Rating value for a row.

    Tried in order: a numeric rating column, the performance rating score,
    the performance rating text (mapped to a score), then a non-numeric
    rating label passed through as-is for exact band-name matching. 0 when
    nothing is usable (the engine then applies its fallback band).
    """
    raw_rating = _first_present(row, RATING_COLUMNS)
    label = None
    if raw_rating is not None and str(raw_rating).strip() != "None":
        value = parse_amount(raw_rating)
        if value is not None:
            return _tidy_number(value)
        label = str(raw_rating).strip()

    score = parse_amount(row.get(PERFORMANCE_SCORE_COLUMN))
    if score is not None and score > 0:
        return _tidy_number(score)

    from_text = _rating_from_text(str(row.get(PERFORMANCE_TEXT_COLUMN) or ""))
    if from_text:
        return from_text
    return label if label is not None else 0


def normalize_row(row: Mapping[str, Any]) -> InputRecord | ProcessedResult:
    """Normalize one source row, or describe why it cannot be priced."""
    stock_id = _first_present(row, STOCK_ID_COLUMNS)
    current_price = parse_amount(_first_present(row, PRICE_COLUMNS))
    age_days = parse_amount(_first_present(row, AGE_COLUMNS))

    errors = []
    if stock_id is None:
        errors.append("Missing VRM/ID")
    if current_price is None or current_price <= 0:
        errors.append("Invalid/missing price")
    if age_days is None or age_days < 0:
        errors.append("Invalid/missing age/mileage")
    if errors:
        return ProcessedResult.data_error(
            ", ".join(errors),
            stock_id=str(stock_id).strip() if stock_id is not None else MISSING_STOCK_ID,
            current_price=current_price or 0,
        )

    days_since_change = parse_amount(row.get(DAYS_SINCE_CHANGE_COLUMN))
    return InputRecord(
        stock_id=str(stock_id).strip(),
        current_price=current_price,
        age_days=_tidy_number(age_days),
        rating_band=extract_rating(row),
        days_since_last_change=int(days_since_change) if days_since_change and days_since_change > 0 else 0,
        fields=dict(row),
    )


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[InputRecord | ProcessedResult]:
    """Normalize rows in order, dropping rows with no values at all."""
    normalized = []
    for row in rows:
        if not any(str(value).strip() for value in row.values() if value is not None):
            continue
        normalized.append(normalize_row(row))
    invalid = sum(1 for item in normalized if isinstance(item, ProcessedResult))
    if invalid:
        logger.warning(f"{invalid} of {len(normalized)} rows failed validation")
    return normalized


def read_csv_rows(source: str | Path | IO[str]) -> list[dict[str, str]]:
    """Read a CSV as text columns (no type inference, empty cells as '')."""
    frame = pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame.to_dict(orient="records")


def load_records(source: str | Path | IO[str]) -> list[InputRecord | ProcessedResult]:
    """Read and normalize a stock CSV file or buffer."""
    rows = read_csv_rows(source)
    logger.info(f"Read {len(rows)} rows from {getattr(source, 'name', source)}")
    return normalize_rows(rows)
