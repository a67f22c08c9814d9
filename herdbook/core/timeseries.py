"""Month-bucketed history for the performance charts.

Every bucket carries two views of the same money:

- period values: records dated inside that calendar month
- cumulative values: records dated on or before the month's last day, going
  back to the start of all recorded history, not just the window. The oldest
  bucket's cumulative figures already include everything before the window.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from herdbook.core.finance import ZERO
from herdbook.core.profit import sale_price_of
from herdbook.core.records import Snapshot
from herdbook.core.time_utils import month_end, month_label, month_start, shift_months

logger = logging.getLogger(__name__)

MAX_WINDOW_MONTHS = 12


@dataclass(frozen=True)
class MonthBucket:
    label: str
    year: int
    month: int
    period_start: date
    period_end: date
    investment: Decimal
    revenue: Decimal
    expenses: Decimal
    cumulative_investment: Decimal
    cumulative_revenue: Decimal
    cumulative_expenses: Decimal

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.investment - self.expenses

    @property
    def cumulative_profit(self) -> Decimal:
        return self.cumulative_revenue - self.cumulative_investment - self.cumulative_expenses


class _DatedLedger:

    def __init__(self, entries: list[tuple[date, Decimal]]) -> None:
        entries = sorted(entries, key=lambda entry: entry[0])
        self._days = [day for day, _amount in entries]
        self._prefix = [ZERO]
        for _day, amount in entries:
            self._prefix.append(self._prefix[-1] + amount)

    def through(self, day: date) -> Decimal:
        return self._prefix[bisect_right(self._days, day)]

    def between(self, start: date, end: date) -> Decimal:
        return self.through(end) - self._prefix[bisect_left(self._days, start)]


def _ledgers(snapshot: Snapshot) -> tuple[_DatedLedger, _DatedLedger, _DatedLedger]:
    purchases: list[tuple[date, Decimal]] = []
    sales: list[tuple[date, Decimal]] = []
    undated_purchases = 0
    undated_sales = 0

    for animal in snapshot.animals:
        if animal.purchase_date is None:
            undated_purchases += 1
        else:
            purchases.append((animal.purchase_date, animal.purchase_price))
        if animal.is_sold:
            price = sale_price_of(animal)
            if animal.sale_date is None:
                undated_sales += 1
            else:
                sales.append((animal.sale_date, price))

    if undated_purchases or undated_sales:
        logger.warning(
            "monthly series skipped undated records: purchases=%s sales=%s",
            undated_purchases,
            undated_sales,
        )

    costs = [(expense.date, expense.amount) for expense in snapshot.expenses]
    costs.extend((event.date, event.cost) for event in snapshot.health_events)
    return _DatedLedger(purchases), _DatedLedger(sales), _DatedLedger(costs)


def monthly_series(
    snapshot: Snapshot, reference_date: date, window_months: int = MAX_WINDOW_MONTHS
) -> list[MonthBucket]:
    if not 1 <= window_months <= MAX_WINDOW_MONTHS:
        raise ValueError(f"window_months must be between 1 and {MAX_WINDOW_MONTHS}.")

    investment, revenue, costs = _ledgers(snapshot)
    anchor = month_start(reference_date)
    buckets: list[MonthBucket] = []

    for offset in range(window_months - 1, -1, -1):
        start = shift_months(anchor, -offset)
        end = month_end(start)
        buckets.append(
            MonthBucket(
                label=month_label(start),
                year=start.year,
                month=start.month,
                period_start=start,
                period_end=end,
                investment=investment.between(start, end),
                revenue=revenue.between(start, end),
                expenses=costs.between(start, end),
                cumulative_investment=investment.through(end),
                cumulative_revenue=revenue.through(end),
                cumulative_expenses=costs.through(end),
            )
        )
    return buckets
