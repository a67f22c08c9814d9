from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from herdbook.core.allocation import CostBasis, CostBreakdown, cost_breakdown
from herdbook.core.errors import DataIntegrityError
from herdbook.core.finance import ZERO, ratio_percent, safe_average, total
from herdbook.core.records import Animal, AnimalStatus, Snapshot
from herdbook.core.time_utils import in_range

UNTYPED_HEALTH_EVENT = "Other"


@dataclass(frozen=True)
class AnimalProfit:
    animal_id: str
    status: AnimalStatus
    sale_price: Decimal
    purchase_price: Decimal
    costs: CostBreakdown
    profit: Decimal

    @property
    def return_pct(self) -> Decimal:
        return ratio_percent(self.profit, self.purchase_price)


@dataclass(frozen=True)
class HerdCounts:
    total: int = 0
    active: int = 0
    sold: int = 0
    deceased: int = 0
    caretakers: int = 0


@dataclass(frozen=True)
class HealthTypeTotal:
    records: int = 0
    cost: Decimal = ZERO


@dataclass(frozen=True)
class PortfolioSummary:
    total_investment: Decimal = ZERO
    total_revenue: Decimal = ZERO
    general_expenses: Decimal = ZERO
    health_costs: Decimal = ZERO
    net_profit: Decimal = ZERO
    profit_margin: Decimal = ZERO
    roi: Decimal = ZERO
    average_profit_per_sale: Decimal = ZERO
    sales_count: int = 0
    # Zero until compute_portfolio_summary runs the compensation pass.
    caretaker_payout: Decimal = ZERO
    owner_earnings: Decimal = ZERO
    herd: HerdCounts = field(default_factory=HerdCounts)

    @property
    def total_expenses(self) -> Decimal:
        return self.general_expenses + self.health_costs


def sale_price_of(animal: Animal) -> Decimal:
    if not animal.is_sold:
        return ZERO
    if animal.sale_price is None:
        raise DataIntegrityError(f"Animal '{animal.id}' is Sold but has no sale price.")
    return animal.sale_price


def cost_date_for(animal: Animal, freeze_at_sale: bool) -> date | None:
    if freeze_at_sale and animal.is_sold:
        return animal.sale_date
    return None


def animal_profit_report(
    snapshot: Snapshot,
    animal: Animal,
    *,
    basis: CostBasis | None = None,
    freeze_at_sale: bool = False,
) -> AnimalProfit:
    costs = cost_breakdown(
        snapshot, animal, as_of=cost_date_for(animal, freeze_at_sale), basis=basis
    )
    sale_price = sale_price_of(animal)
    profit = sale_price - animal.purchase_price - costs.total if animal.is_sold else ZERO
    return AnimalProfit(
        animal_id=animal.id,
        status=animal.status,
        sale_price=sale_price,
        purchase_price=animal.purchase_price,
        costs=costs,
        profit=profit,
    )


def animal_profit(
    snapshot: Snapshot,
    animal: Animal,
    *,
    basis: CostBasis | None = None,
    freeze_at_sale: bool = False,
) -> Decimal:
    if not animal.is_sold:
        return ZERO
    return animal_profit_report(
        snapshot, animal, basis=basis, freeze_at_sale=freeze_at_sale
    ).profit


def herd_counts(snapshot: Snapshot) -> HerdCounts:
    statuses = [animal.status for animal in snapshot.animals]
    return HerdCounts(
        total=len(statuses),
        active=statuses.count(AnimalStatus.ACTIVE),
        sold=statuses.count(AnimalStatus.SOLD),
        deceased=statuses.count(AnimalStatus.DECEASED),
        caretakers=len(snapshot.caretakers),
    )


def _ranged(start: date | None, end: date | None):
    if start is None and end is None:
        return lambda _day: True
    return lambda day: in_range(day, start, end)


def portfolio_summary(
    snapshot: Snapshot,
    start: date | None = None,
    end: date | None = None,
    *,
    freeze_at_sale: bool = False,
) -> PortfolioSummary:
    if start is not None and end is not None and start > end:
        raise ValueError("Reporting range start must be <= end.")
    within = _ranged(start, end)

    total_investment = total(
        animal.purchase_price for animal in snapshot.animals if within(animal.purchase_date)
    )
    sold = [
        animal for animal in snapshot.animals if animal.is_sold and within(animal.sale_date)
    ]
    total_revenue = total(sale_price_of(animal) for animal in sold)
    general_expenses = total(
        expense.amount for expense in snapshot.expenses if within(expense.date)
    )
    health_costs = total(event.cost for event in snapshot.health_events if within(event.date))
    net_profit = total_revenue - total_investment - general_expenses - health_costs

    basis = CostBasis.from_snapshot(snapshot)
    profit_sum = total(
        animal_profit(snapshot, animal, basis=basis, freeze_at_sale=freeze_at_sale)
        for animal in sold
    )

    return PortfolioSummary(
        total_investment=total_investment,
        total_revenue=total_revenue,
        general_expenses=general_expenses,
        health_costs=health_costs,
        net_profit=net_profit,
        profit_margin=ratio_percent(net_profit, total_revenue),
        roi=ratio_percent(net_profit, total_investment),
        average_profit_per_sale=safe_average(profit_sum, len(sold)),
        sales_count=len(sold),
        herd=herd_counts(snapshot),
    )


def expenses_by_category(
    snapshot: Snapshot, start: date | None = None, end: date | None = None
) -> dict[str, Decimal]:
    within = _ranged(start, end)
    breakdown: dict[str, Decimal] = {}
    for expense in snapshot.expenses:
        if not within(expense.date):
            continue
        breakdown[expense.category] = breakdown.get(expense.category, ZERO) + expense.amount
    return breakdown


def health_costs_by_type(
    snapshot: Snapshot, start: date | None = None, end: date | None = None
) -> dict[str, HealthTypeTotal]:
    within = _ranged(start, end)
    breakdown: dict[str, HealthTypeTotal] = {}
    for event in snapshot.health_events:
        if not within(event.date):
            continue
        kind = event.kind or UNTYPED_HEALTH_EVENT
        current = breakdown.get(kind, HealthTypeTotal())
        breakdown[kind] = HealthTypeTotal(current.records + 1, current.cost + event.cost)
    return breakdown


def combine_summaries(summaries: Iterable[PortfolioSummary]) -> PortfolioSummary:
    summaries = list(summaries)
    total_investment = total(s.total_investment for s in summaries)
    total_revenue = total(s.total_revenue for s in summaries)
    net_profit = total(s.net_profit for s in summaries)
    sales_count = sum(s.sales_count for s in summaries)
    profit_sum = total(s.average_profit_per_sale * s.sales_count for s in summaries)
    return PortfolioSummary(
        total_investment=total_investment,
        total_revenue=total_revenue,
        general_expenses=total(s.general_expenses for s in summaries),
        health_costs=total(s.health_costs for s in summaries),
        net_profit=net_profit,
        profit_margin=ratio_percent(net_profit, total_revenue),
        roi=ratio_percent(net_profit, total_investment),
        average_profit_per_sale=safe_average(profit_sum, sales_count),
        sales_count=sales_count,
        caretaker_payout=total(s.caretaker_payout for s in summaries),
        owner_earnings=total(s.owner_earnings for s in summaries),
        herd=HerdCounts(
            total=sum(s.herd.total for s in summaries),
            active=sum(s.herd.active for s in summaries),
            sold=sum(s.herd.sold for s in summaries),
            deceased=sum(s.herd.deceased for s in summaries),
            caretakers=sum(s.herd.caretakers for s in summaries),
        ),
    )
