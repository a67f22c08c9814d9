from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value: float | int | str | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Value '{value}' is not numeric.") from exc


def money(value: float | Decimal, digits: int = 2) -> float:
    return round(float(value), digits)


def total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return amount * percentage / HUNDRED


def ratio_percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == ZERO:
        return ZERO
    return numerator / denominator * HUNDRED


def safe_average(amount: Decimal, count: int) -> Decimal:
    if count <= 0:
        return ZERO
    return amount / Decimal(count)
