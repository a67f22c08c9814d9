# Test type: Unit (monthly series)
# Validation: fixed window length, chronological order, period vs cumulative totals, pre-window history, determinism
# Command: pytest -q

from datetime import date
from decimal import Decimal

import pytest

from herdbook.core.records import Animal, AnimalStatus, Snapshot
from herdbook.core.timeseries import monthly_series


def test_empty_snapshot_gives_twelve_zero_buckets(empty_snapshot):
    buckets = monthly_series(empty_snapshot, date(2024, 6, 20))

    assert len(buckets) == 12
    for bucket in buckets:
        assert bucket.investment == bucket.revenue == bucket.expenses == 0
        assert bucket.cumulative_profit == 0


def test_buckets_are_strictly_chronological_across_year_end(empty_snapshot):
    buckets = monthly_series(empty_snapshot, date(2024, 3, 31))

    keys = [(bucket.year, bucket.month) for bucket in buckets]
    assert keys == sorted(set(keys))
    assert keys[0] == (2023, 4)
    assert keys[-1] == (2024, 3)
    assert [bucket.label for bucket in buckets[:3]] == ["Apr", "May", "Jun"]
    assert buckets[10].period_start == date(2024, 2, 1)
    assert buckets[10].period_end == date(2024, 2, 29)


def test_scenario_period_values(scenario):
    buckets = {(b.year, b.month): b for b in monthly_series(scenario, date(2024, 7, 10))}

    january = buckets[(2024, 1)]
    assert january.investment == Decimal("15000")
    assert january.label == "Jan"

    june = buckets[(2024, 6)]
    assert june.revenue == Decimal("18000")
    assert june.profit == Decimal("18000")

    april = buckets[(2024, 4)]
    assert april.expenses == Decimal("500")

    july = buckets[(2024, 7)]
    assert july.investment == Decimal("5000")
    assert july.cumulative_investment == Decimal("20000")
    assert july.cumulative_revenue == Decimal("18000")
    assert july.cumulative_expenses == Decimal("3500")
    assert july.cumulative_profit == Decimal("-5500")


def test_cumulative_values_include_history_before_the_window():
    old = Animal(
        id="old",
        status=AnimalStatus.SOLD,
        purchase_price=Decimal("4000"),
        purchase_date=date(2020, 5, 1),
        sale_price=Decimal("6000"),
        sale_date=date(2021, 1, 1),
    )
    recent = Animal(
        id="new",
        status=AnimalStatus.SOLD,
        purchase_price=Decimal("1000"),
        purchase_date=date(2024, 2, 14),
        sale_price=Decimal("2500"),
        sale_date=date(2024, 5, 31),
    )
    buckets = monthly_series(Snapshot(animals=(old, recent)), date(2024, 6, 1))

    first, last = buckets[0], buckets[-1]
    assert first.investment == 0
    assert first.cumulative_investment == Decimal("4000")
    assert first.cumulative_revenue == Decimal("6000")

    window_revenue = sum(bucket.revenue for bucket in buckets)
    assert window_revenue == last.cumulative_revenue - (first.cumulative_revenue - first.revenue)
    assert window_revenue == Decimal("2500")


def test_month_boundaries_are_inclusive():
    goat = Animal(
        id="g",
        status=AnimalStatus.SOLD,
        purchase_price=Decimal("10"),
        purchase_date=date(2024, 4, 1),
        sale_price=Decimal("20"),
        sale_date=date(2024, 4, 30),
    )
    buckets = monthly_series(Snapshot(animals=(goat,)), date(2024, 4, 15), window_months=2)

    assert [bucket.label for bucket in buckets] == ["Mar", "Apr"]
    assert buckets[1].investment == Decimal("10")
    assert buckets[1].revenue == Decimal("20")


def test_undated_records_are_left_out():
    undated = Animal(
        id="u",
        status=AnimalStatus.SOLD,
        purchase_price=Decimal("10"),
        sale_price=Decimal("20"),
    )
    buckets = monthly_series(Snapshot(animals=(undated,)), date(2024, 4, 15))

    assert buckets[-1].cumulative_investment == 0
    assert buckets[-1].cumulative_revenue == 0


def test_series_is_deterministic(scenario):
    reference = date(2024, 8, 3)

    assert monthly_series(scenario, reference) == monthly_series(scenario, reference)


@pytest.mark.parametrize("window", [0, 13, -1])
def test_window_outside_a_year_is_rejected(empty_snapshot, window):
    with pytest.raises(ValueError, match="window_months"):
        monthly_series(empty_snapshot, date(2024, 1, 1), window_months=window)
