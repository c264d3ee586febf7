import pytest

from models.enums import PriceAction
from models.pricing import ProcessedResult
from utils.statistics import calculate_statistics, financial_impact


def _result(stock_id, current_price, new_price, reason):
    return ProcessedResult(
        stock_id=stock_id,
        current_price=current_price,
        reference_price=10000,
        target_percent=98.78,
        target_price=9878,
        new_price=new_price,
        reason=reason,
    )


@pytest.fixture
def results():
    return [
        _result("A", 9878, 9878, "Within strategy"),
        _result("B", 9000, 9878, "Increase to target (98.78%)"),
        _result("C", 11000, 9878, "Decrease to target (98.78%)"),
        _result("D", 9878, 9778, "Stale nudge (10 days) - Within strategy"),
        _result("E", 9700, 9800, "Stale nudge (8 days) - Within strategy"),
        _result("F", 9878, 9878, "Within strategy (Stale 10 days but nudge fails tolerance)"),
        _result("G", 9875, 9875, "Price OK (Rounded)"),
        ProcessedResult.data_error("Missing VRM/ID", stock_id="MISSING", current_price=5000),
    ]


def test_summary_counts(results):
    summary = calculate_statistics(results).summary
    assert summary == {
        "total_stocks": 8,
        "within_strategy": 1,
        "increases": 1,
        "decreases": 1,
        "stale_nudge_increases": 1,
        "stale_nudge_decreases": 1,
        "optimized": 2,
        "nudge_blocked": 1,
        "rounded_ok": 1,
        "data_issues": 1,
        "total_within_strategy": 4,
        "increase_within_strategy": 1,
        "decrease_within_strategy": 1,
        "not_change": 1,
        "price_increase": 1,
        "price_decrease": 1,
    }


def test_action_buckets_partition_the_batch(results):
    counts = calculate_statistics(results).action_counts
    assert set(counts) == set(PriceAction)
    assert sum(counts.values()) == len(results)


def test_financial_impact(results):
    stats = financial_impact(results)
    assert stats["total_increment"] == pytest.approx(878 + 100)
    assert stats["total_drop"] == pytest.approx(1122 + 100)
    assert stats["net_impact"] == pytest.approx(978 - 1222)


def test_financial_impact_ignores_data_errors():
    weird_error = ProcessedResult(
        stock_id="X",
        current_price=100,
        reference_price=0,
        target_percent=0,
        target_price=0,
        new_price=500,
        reason="Data Error: something odd",
    )
    assert financial_impact([weird_error]) == {
        "total_increment": 0.0,
        "total_drop": 0.0,
        "net_impact": 0.0,
    }


def test_stale_nudge_without_change_counts_as_decrease():
    result = _result("A", 9878, 9878, "Stale nudge (7 days) - Within strategy")
    summary = calculate_statistics([result]).summary
    assert summary["stale_nudge_increases"] == 0
    assert summary["stale_nudge_decreases"] == 1


def test_sample_results(results):
    statistics = calculate_statistics(results, sample_size=3)
    assert [result.stock_id for result in statistics.sample_results] == ["A", "B", "C"]
    assert calculate_statistics(results, sample_size=0).sample_results == []


def test_to_dict(results):
    data = calculate_statistics(results, sample_size=1).to_dict()
    assert data["summary"]["total_stocks"] == 8
    assert data["action_counts"]["data_error"] == 1
    assert data["sample_results"][0]["stock_id"] == "A"


def test_summary_legacy_key_names(results):
    summary = calculate_statistics(results).summary
    assert summary["increase_within_strategy"] == summary["stale_nudge_increases"]
    assert summary["decrease_within_strategy"] == summary["stale_nudge_decreases"]
    assert summary["not_change"] == summary["within_strategy"]
    assert summary["price_increase"] == summary["increases"]
    assert summary["price_decrease"] == summary["decreases"]
