from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable

from herdbook.core.allocation import CostBasis
from herdbook.core.errors import UnknownPaymentModelError
from herdbook.core.finance import ZERO, percent_of, safe_average, total
from herdbook.core.profit import animal_profit
from herdbook.core.records import (
    Animal,
    Caretaker,
    PaymentModel,
    PaymentModelType,
    Snapshot,
)
from herdbook.core.time_utils import in_range, whole_months_between


@dataclass(frozen=True)
class CaretakerEarnings:
    caretaker_id: str
    name: str
    model: PaymentModelType
    goats_assigned: int
    goats_active: int
    goats_managed: int
    earnings: Decimal

    @property
    def average_earnings_per_sale(self) -> Decimal:
        return safe_average(self.earnings, self.goats_managed)


@dataclass
class _PolicyInput:
    snapshot: Snapshot
    model: PaymentModel
    basis: CostBasis
    freeze_at_sale: bool


def _percentage_share(animal: Animal, ctx: _PolicyInput) -> Decimal:
    profit = animal_profit(
        ctx.snapshot, animal, basis=ctx.basis, freeze_at_sale=ctx.freeze_at_sale
    )
    return percent_of(profit, ctx.model.amount)


def _fixed_per_sale(animal: Animal, ctx: _PolicyInput) -> Decimal:
    return ctx.model.amount


def _monthly_duration(animal: Animal, ctx: _PolicyInput) -> Decimal:
    if animal.purchase_date is None or animal.sale_date is None:
        return ZERO
    months = whole_months_between(animal.purchase_date, animal.sale_date)
    return ctx.model.amount * months


POLICIES: dict[PaymentModelType, Callable[[Animal, _PolicyInput], Decimal]] = {
    PaymentModelType.PERCENTAGE: _percentage_share,
    PaymentModelType.FIXED_PER_SALE: _fixed_per_sale,
    PaymentModelType.MONTHLY: _monthly_duration,
}


def _policy_for(model: PaymentModel) -> Callable[[Animal, _PolicyInput], Decimal]:
    policy = POLICIES.get(model.type)
    if policy is None:
        raise UnknownPaymentModelError(f"Unknown payment model type: {model.type!r}")
    return policy


def caretaker_earnings(
    snapshot: Snapshot,
    caretaker: Caretaker,
    *,
    basis: CostBasis | None = None,
    freeze_at_sale: bool = False,
    start: date | None = None,
    end: date | None = None,
) -> CaretakerEarnings:
    model = snapshot.payment_model
    policy = _policy_for(model)
    ctx = _PolicyInput(
        snapshot=snapshot,
        model=model,
        basis=basis or CostBasis.from_snapshot(snapshot),
        freeze_at_sale=freeze_at_sale,
    )

    assigned = [animal for animal in snapshot.animals if animal.caretaker_id == caretaker.id]
    managed = [animal for animal in assigned if animal.is_sold]
    if start is not None or end is not None:
        managed = [animal for animal in managed if in_range(animal.sale_date, start, end)]

    return CaretakerEarnings(
        caretaker_id=caretaker.id,
        name=caretaker.name,
        model=model.type,
        goats_assigned=len(assigned),
        goats_active=sum(1 for animal in assigned if animal.is_active),
        goats_managed=len(managed),
        earnings=total(policy(animal, ctx) for animal in managed),
    )


def caretaker_roster(
    snapshot: Snapshot,
    *,
    freeze_at_sale: bool = False,
    start: date | None = None,
    end: date | None = None,
) -> list[CaretakerEarnings]:
    basis = CostBasis.from_snapshot(snapshot)
    return [
        caretaker_earnings(
            snapshot,
            caretaker,
            basis=basis,
            freeze_at_sale=freeze_at_sale,
            start=start,
            end=end,
        )
        for caretaker in snapshot.caretakers
    ]


def profit_share_payout(roster: list[CaretakerEarnings], model: PaymentModel) -> Decimal:
    # Fixed and monthly pay are already booked as expenses; only percentage
    # shares come out of the owner residual.
    _policy_for(model)
    if model.type != PaymentModelType.PERCENTAGE:
        return ZERO
    return total(entry.earnings for entry in roster)


def owner_earnings(
    net_profit: Decimal, roster: list[CaretakerEarnings], model: PaymentModel
) -> Decimal:
    return net_profit - profit_share_payout(roster, model)


def sale_split(
    net_profit: Decimal, model: PaymentModel, has_caretaker: bool
) -> tuple[Decimal, Decimal]:
    _policy_for(model)
    if not has_caretaker or model.type != PaymentModelType.PERCENTAGE:
        return net_profit, ZERO
    caretaker_share = percent_of(net_profit, model.amount)
    return net_profit - caretaker_share, caretaker_share
