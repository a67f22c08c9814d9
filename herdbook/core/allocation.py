"""Cost allocation for individual animals.

An animal's cost is its own tagged expenses, plus an even share of the
untagged (shared) expenses across the active herd, plus its health costs.

Without an `as_of` date the shared pool and the head count come from the
snapshot as it stands, so a sold animal's share moves as the herd changes.
With `as_of`, only records dated on or before that day count, and the head
count is the herd held on that day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from herdbook.core.finance import ZERO, total
from herdbook.core.records import Animal, Snapshot

logger = logging.getLogger(__name__)


def _on_or_before(day: date, as_of: date | None) -> bool:
    return as_of is None or day <= as_of


@dataclass(frozen=True)
class CostBasis:
    shared_pool: Decimal
    active_count: int
    as_of: date | None = None

    @property
    def shared_share(self) -> Decimal:
        return self.shared_pool / Decimal(self.active_count)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, as_of: date | None = None) -> "CostBasis":
        shared_pool = total(
            expense.amount
            for expense in snapshot.expenses
            if expense.is_shared and _on_or_before(expense.date, as_of)
        )
        if as_of is None:
            head_count = sum(1 for animal in snapshot.animals if animal.is_active)
        else:
            head_count = sum(1 for animal in snapshot.animals if animal.held_on(as_of))
        basis = cls(shared_pool=shared_pool, active_count=max(1, head_count), as_of=as_of)
        logger.debug(
            "cost basis: shared_pool=%s active_count=%s as_of=%s",
            basis.shared_pool,
            basis.active_count,
            as_of,
        )
        return basis


@dataclass(frozen=True)
class CostBreakdown:
    specific: Decimal
    shared_share: Decimal
    health: Decimal

    @property
    def total(self) -> Decimal:
        return self.specific + self.shared_share + self.health


def cost_breakdown(
    snapshot: Snapshot,
    animal: Animal,
    as_of: date | None = None,
    basis: CostBasis | None = None,
) -> CostBreakdown:
    if basis is None or basis.as_of != as_of:
        basis = CostBasis.from_snapshot(snapshot, as_of)

    specific = total(
        expense.amount
        for expense in snapshot.expenses
        if expense.goat_id == animal.id and _on_or_before(expense.date, as_of)
    )
    health = total(
        event.cost
        for event in snapshot.health_events
        if event.goat_id == animal.id and _on_or_before(event.date, as_of)
    )
    shared_share = basis.shared_share if basis.shared_pool else ZERO
    return CostBreakdown(specific=specific, shared_share=shared_share, health=health)


def allocated_cost(
    snapshot: Snapshot,
    animal: Animal,
    as_of: date | None = None,
    basis: CostBasis | None = None,
) -> Decimal:
    return cost_breakdown(snapshot, animal, as_of=as_of, basis=basis).total
