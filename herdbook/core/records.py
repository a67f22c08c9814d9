from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Protocol

from herdbook.core.errors import RecordNotFoundError, UnknownPaymentModelError
from herdbook.core.finance import ZERO, to_decimal
from herdbook.core.time_utils import parse_date, parse_optional_date


class AnimalStatus(str, Enum):
    ACTIVE = "Active"
    SOLD = "Sold"
    DECEASED = "Deceased"


class PaymentModelType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_PER_SALE = "fixed_per_sale"
    MONTHLY = "monthly"


class ExpenseCategory(str, Enum):
    FEED = "Feed"
    MEDICINE = "Medicine"
    TRANSPORT = "Transport"
    VETERINARY = "Veterinary"
    OTHER = "Other"


def _required(data: dict, *keys: str) -> object:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    raise ValueError(f"Missing field: {keys[0]}")


def _to_money(value: object, field_name: str, *, allow_zero: bool = True) -> Decimal:
    if value is None:
        raise ValueError(f"Missing field: {field_name}")
    if isinstance(value, bool):
        raise ValueError(f"Field '{field_name}' must be numeric.")
    try:
        amount = to_decimal(value)
    except ValueError as exc:
        raise ValueError(f"Field '{field_name}' must be numeric.") from exc
    if not amount.is_finite():
        raise ValueError(f"Field '{field_name}' must be numeric.")
    if amount < ZERO or (not allow_zero and amount == ZERO):
        qualifier = "negative" if allow_zero else "zero or negative"
        raise ValueError(f"Field '{field_name}' cannot be {qualifier}.")
    return amount


def _optional_money(value: object, field_name: str) -> Decimal | None:
    if value is None:
        return None
    return _to_money(value, field_name)


def _optional_id(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Animal:
    id: str
    status: AnimalStatus
    purchase_price: Decimal
    purchase_date: date | None = None
    sale_price: Decimal | None = None
    sale_date: date | None = None
    caretaker_id: str | None = None
    tag_number: str | None = None
    current_weight: Decimal | None = None

    @property
    def is_active(self) -> bool:
        return self.status == AnimalStatus.ACTIVE

    @property
    def is_sold(self) -> bool:
        return self.status == AnimalStatus.SOLD

    def held_on(self, day: date) -> bool:
        if self.status == AnimalStatus.DECEASED:
            return False
        if self.purchase_date is None or self.purchase_date > day:
            return False
        return self.sale_date is None or self.sale_date >= day

    @classmethod
    def from_dict(cls, data: dict) -> "Animal":
        try:
            status = AnimalStatus(_required(data, "status"))
        except ValueError as exc:
            raise ValueError(f"Unknown animal status: {data.get('status')!r}") from exc
        return cls(
            id=str(_required(data, "id")),
            status=status,
            purchase_price=_to_money(
                data.get("purchasePrice", data.get("purchase_price", 0)), "purchasePrice"
            ),
            purchase_date=parse_optional_date(data.get("purchaseDate", data.get("purchase_date"))),
            sale_price=_optional_money(data.get("salePrice", data.get("sale_price")), "salePrice"),
            sale_date=parse_optional_date(data.get("saleDate", data.get("sale_date"))),
            caretaker_id=_optional_id(data.get("caretakerId", data.get("caretaker_id"))),
            tag_number=data.get("tagNumber", data.get("tag_number")),
            current_weight=_optional_money(
                data.get("currentWeight", data.get("current_weight")), "currentWeight"
            ),
        )


@dataclass(frozen=True)
class Expense:
    id: str
    amount: Decimal
    date: date
    category: str = ExpenseCategory.OTHER.value
    goat_id: str | None = None

    @property
    def is_shared(self) -> bool:
        return self.goat_id is None

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        return cls(
            id=str(_required(data, "id")),
            amount=_to_money(data.get("amount"), "amount", allow_zero=False),
            date=parse_date(_required(data, "date")),
            category=str(data.get("category") or ExpenseCategory.OTHER.value),
            goat_id=_optional_id(data.get("goatId", data.get("goat_id"))),
        )


@dataclass(frozen=True)
class HealthEvent:
    id: str
    goat_id: str
    cost: Decimal
    date: date
    kind: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "HealthEvent":
        return cls(
            id=str(_required(data, "id")),
            goat_id=str(_required(data, "goatId", "goat_id")),
            cost=_to_money(data.get("cost", 0), "cost"),
            date=parse_date(_required(data, "date")),
            kind=data.get("type", data.get("kind")),
        )


@dataclass(frozen=True)
class Caretaker:
    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Caretaker":
        return cls(id=str(_required(data, "id")), name=str(data.get("name") or ""))


@dataclass(frozen=True)
class PaymentModel:
    type: PaymentModelType
    amount: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentModel":
        raw_type = _required(data, "type")
        try:
            model_type = PaymentModelType(raw_type)
        except ValueError as exc:
            raise UnknownPaymentModelError(f"Unknown payment model type: {raw_type!r}") from exc
        amount = _to_money(data.get("amount", 0), "amount")
        if model_type == PaymentModelType.PERCENTAGE and amount > Decimal("100"):
            raise ValueError("Percentage payment model amount must be within 0-100.")
        return cls(type=model_type, amount=amount)


DEFAULT_PAYMENT_MODEL = PaymentModel(type=PaymentModelType.PERCENTAGE, amount=ZERO)


@dataclass(frozen=True)
class Snapshot:
    animals: tuple[Animal, ...] = ()
    expenses: tuple[Expense, ...] = ()
    health_events: tuple[HealthEvent, ...] = ()
    caretakers: tuple[Caretaker, ...] = ()
    payment_model: PaymentModel = field(default=DEFAULT_PAYMENT_MODEL)

    def animal(self, animal_id: str) -> Animal:
        for animal in self.animals:
            if animal.id == animal_id:
                return animal
        raise RecordNotFoundError(f"Animal '{animal_id}' not found.")

    def caretaker(self, caretaker_id: str) -> Caretaker:
        for caretaker in self.caretakers:
            if caretaker.id == caretaker_id:
                return caretaker
        raise RecordNotFoundError(f"Caretaker '{caretaker_id}' not found.")

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        payment_model = data.get("paymentModel", data.get("payment_model"))
        return cls(
            animals=tuple(Animal.from_dict(item) for item in data.get("animals") or []),
            expenses=tuple(Expense.from_dict(item) for item in data.get("expenses") or []),
            health_events=tuple(
                HealthEvent.from_dict(item)
                for item in data.get("healthEvents", data.get("health_events")) or []
            ),
            caretakers=tuple(Caretaker.from_dict(item) for item in data.get("caretakers") or []),
            payment_model=(
                PaymentModel.from_dict(payment_model)
                if payment_model is not None
                else DEFAULT_PAYMENT_MODEL
            ),
        )


class RecordStore(Protocol):
    def list_animals(self) -> list[Animal]: ...

    def list_expenses(self) -> list[Expense]: ...

    def list_health_events(self) -> list[HealthEvent]: ...

    def list_caretakers(self) -> list[Caretaker]: ...

    def get_payment_model(self) -> PaymentModel: ...

    def save_animal(self, animal: Animal) -> None: ...


class InMemoryRecordStore:
    def __init__(
        self,
        animals: Iterable[Animal] = (),
        expenses: Iterable[Expense] = (),
        health_events: Iterable[HealthEvent] = (),
        caretakers: Iterable[Caretaker] = (),
        payment_model: PaymentModel = DEFAULT_PAYMENT_MODEL,
    ) -> None:
        self._animals = list(animals)
        self._expenses = list(expenses)
        self._health_events = list(health_events)
        self._caretakers = list(caretakers)
        self._payment_model = payment_model

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "InMemoryRecordStore":
        return cls(
            animals=snapshot.animals,
            expenses=snapshot.expenses,
            health_events=snapshot.health_events,
            caretakers=snapshot.caretakers,
            payment_model=snapshot.payment_model,
        )

    def list_animals(self) -> list[Animal]:
        return list(self._animals)

    def list_expenses(self) -> list[Expense]:
        return list(self._expenses)

    def list_health_events(self) -> list[HealthEvent]:
        return list(self._health_events)

    def list_caretakers(self) -> list[Caretaker]:
        return list(self._caretakers)

    def get_payment_model(self) -> PaymentModel:
        return self._payment_model

    def save_animal(self, animal: Animal) -> None:
        for index, existing in enumerate(self._animals):
            if existing.id == animal.id:
                self._animals[index] = animal
                return
        raise RecordNotFoundError(f"Animal '{animal.id}' not found.")


def snapshot_from_store(store: RecordStore) -> Snapshot:
    return Snapshot(
        animals=tuple(store.list_animals()),
        expenses=tuple(store.list_expenses()),
        health_events=tuple(store.list_health_events()),
        caretakers=tuple(store.list_caretakers()),
        payment_model=store.get_payment_model(),
    )


def mark_sold(animal: Animal, sale_price: Decimal, sale_date: date) -> Animal:
    return replace(animal, status=AnimalStatus.SOLD, sale_price=sale_price, sale_date=sale_date)
