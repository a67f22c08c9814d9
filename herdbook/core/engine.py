from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from herdbook.core.allocation import cost_breakdown
from herdbook.core.compensation import (
    CaretakerEarnings,
    caretaker_earnings,
    caretaker_roster,
    owner_earnings,
    profit_share_payout,
    sale_split,
)
from herdbook.core.config import Settings, get_settings
from herdbook.core.errors import DataIntegrityError
from herdbook.core.finance import ONE, ZERO, ratio_percent, to_decimal
from herdbook.core.profit import (
    AnimalProfit,
    HealthTypeTotal,
    PortfolioSummary,
    animal_profit_report,
    combine_summaries,
    expenses_by_category,
    health_costs_by_type,
    portfolio_summary,
)
from herdbook.core.records import Animal, RecordStore, Snapshot, mark_sold, snapshot_from_store
from herdbook.core.time_utils import whole_months_between
from herdbook.core.timeseries import MonthBucket, monthly_series

logger = logging.getLogger(__name__)

MONTHLY_CARE_UPLIFT = Decimal("0.05")
MAX_CARE_UPLIFT = Decimal("0.5")
HEALTHY_UPLIFT = Decimal("0.05")
WEIGHT_UPLIFT = Decimal("0.1")
REFERENCE_WEIGHT_KG = Decimal("35")
UNDERWEIGHT_RATIO = Decimal("0.8")
EXPENSE_RECOVERY_MARKUP = Decimal("1.2")


@dataclass(frozen=True)
class SaleQuote:
    animal_id: str
    sale_price: Decimal
    total_costs: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    owner_share: Decimal
    caretaker_share: Decimal


@dataclass(frozen=True)
class SaleReceipt:
    animal: Animal
    quote: SaleQuote


def _settings(settings: Settings | None) -> Settings:
    return settings if settings is not None else get_settings()


def compute_portfolio_summary(
    snapshot: Snapshot,
    start: date | None = None,
    end: date | None = None,
    *,
    settings: Settings | None = None,
) -> PortfolioSummary:
    freeze = _settings(settings).freeze_shared_cost_at_sale
    summary = portfolio_summary(snapshot, start, end, freeze_at_sale=freeze)
    roster = caretaker_roster(snapshot, freeze_at_sale=freeze, start=start, end=end)
    return replace(
        summary,
        caretaker_payout=profit_share_payout(roster, snapshot.payment_model),
        owner_earnings=owner_earnings(summary.net_profit, roster, snapshot.payment_model),
    )


def compute_combined_summary(
    snapshots: list[Snapshot],
    start: date | None = None,
    end: date | None = None,
    *,
    settings: Settings | None = None,
) -> PortfolioSummary:
    return combine_summaries(
        compute_portfolio_summary(snapshot, start, end, settings=settings)
        for snapshot in snapshots
    )


def compute_animal_profit(
    snapshot: Snapshot, animal_id: str, *, settings: Settings | None = None
) -> AnimalProfit:
    animal = snapshot.animal(animal_id)
    return animal_profit_report(
        snapshot, animal, freeze_at_sale=_settings(settings).freeze_shared_cost_at_sale
    )


def compute_caretaker_earnings(
    snapshot: Snapshot, caretaker_id: str, *, settings: Settings | None = None
) -> CaretakerEarnings:
    caretaker = snapshot.caretaker(caretaker_id)
    return caretaker_earnings(
        snapshot, caretaker, freeze_at_sale=_settings(settings).freeze_shared_cost_at_sale
    )


def compute_caretaker_roster(
    snapshot: Snapshot, *, settings: Settings | None = None
) -> list[CaretakerEarnings]:
    return caretaker_roster(
        snapshot, freeze_at_sale=_settings(settings).freeze_shared_cost_at_sale
    )


def compute_monthly_series(
    snapshot: Snapshot,
    reference_date: date,
    window_months: int | None = None,
    *,
    settings: Settings | None = None,
) -> list[MonthBucket]:
    if window_months is None:
        window_months = _settings(settings).window_months
    return monthly_series(snapshot, reference_date, window_months)


def compute_expense_breakdown(
    snapshot: Snapshot, start: date | None = None, end: date | None = None
) -> dict[str, Decimal]:
    return expenses_by_category(snapshot, start, end)


def compute_health_breakdown(
    snapshot: Snapshot, start: date | None = None, end: date | None = None
) -> dict[str, HealthTypeTotal]:
    return health_costs_by_type(snapshot, start, end)


def quote_sale(snapshot: Snapshot, animal_id: str, sale_price: float | Decimal) -> SaleQuote:
    animal = snapshot.animal(animal_id)
    price = to_decimal(sale_price)
    if price <= ZERO:
        raise ValueError("Sale price must be greater than zero.")

    total_costs = cost_breakdown(snapshot, animal).total
    net_profit = price - animal.purchase_price - total_costs
    owner_share, caretaker_share = sale_split(
        net_profit, snapshot.payment_model, has_caretaker=animal.caretaker_id is not None
    )
    return SaleQuote(
        animal_id=animal.id,
        sale_price=price,
        total_costs=total_costs,
        net_profit=net_profit,
        profit_margin=ratio_percent(net_profit, price),
        owner_share=owner_share,
        caretaker_share=caretaker_share,
    )


def suggest_sale_price(snapshot: Snapshot, animal_id: str, as_of: date) -> Decimal:
    animal = snapshot.animal(animal_id)
    care_uplift = ZERO
    if animal.purchase_date is not None:
        months = whole_months_between(animal.purchase_date, as_of)
        care_uplift = min(MAX_CARE_UPLIFT, MONTHLY_CARE_UPLIFT * months)

    weight_uplift = ZERO
    if animal.current_weight is not None:
        if animal.current_weight > REFERENCE_WEIGHT_KG:
            weight_uplift = WEIGHT_UPLIFT
        elif animal.current_weight < REFERENCE_WEIGHT_KG * UNDERWEIGHT_RATIO:
            weight_uplift = -WEIGHT_UPLIFT

    healthy = not any(event.goat_id == animal.id for event in snapshot.health_events)
    health_uplift = HEALTHY_UPLIFT if healthy else ZERO

    tagged_expenses = cost_breakdown(snapshot, animal).specific
    suggested = (
        animal.purchase_price * (ONE + care_uplift + weight_uplift + health_uplift)
        + tagged_expenses * EXPENSE_RECOVERY_MARKUP
    )
    return suggested.quantize(ONE, rounding=ROUND_HALF_UP)


def finalize_sale(
    store: RecordStore,
    animal_id: str,
    sale_price: float | Decimal,
    sale_date: date,
) -> SaleReceipt:
    snapshot = snapshot_from_store(store)
    animal = snapshot.animal(animal_id)
    if not animal.is_active:
        raise DataIntegrityError(
            f"Animal '{animal_id}' cannot be sold from status {animal.status.value}."
        )
    if animal.purchase_date is not None and sale_date < animal.purchase_date:
        raise ValueError("Sale date cannot be before the purchase date.")

    # Quoted against the herd before the sale.
    quote = quote_sale(snapshot, animal_id, sale_price)
    sold = mark_sold(animal, quote.sale_price, sale_date)
    store.save_animal(sold)
    logger.info(
        "sale finalized: animal=%s price=%s net_profit=%s",
        animal_id,
        quote.sale_price,
        quote.net_profit,
    )
    return SaleReceipt(animal=sold, quote=quote)
