"""Domain entities. State changes produce new instances."""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone

from .domain_errors import DomainError
from .result import Result, ok
from .value_objects import Money, Stock


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password_hash: str
    created_at: datetime

    @classmethod
    def create(
        cls,
        *,
        id: str,
        email: str,
        password_hash: str,
        created_at: datetime | None = None,
    ) -> User:
        return cls(id=id, email=email, password_hash=password_hash, created_at=created_at or utc_now())


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: Money
    stock: Stock
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        *,
        id: str,
        name: str,
        description: str,
        price: Money,
        stock: Stock,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Product:
        now = utc_now()
        return cls(
            id=id,
            name=name,
            description=description,
            price=price,
            stock=stock,
            created_at=created_at or now,
            updated_at=updated_at or created_at or now,
        )

    def is_in_stock(self) -> bool:
        return self.stock.is_in_stock()

    def can_fulfill_order(self, quantity: int) -> bool:
        return self.stock.can_fulfill(quantity)

    def reduce_stock(self, quantity: int) -> Result[Product, DomainError]:
        reduced = self.stock.reduce(quantity)
        if not reduced.ok:
            return reduced
        return ok(replace(self, stock=reduced.value, updated_at=utc_now()))

    def increase_stock(self, quantity: int) -> Result[Product, DomainError]:
        increased = self.stock.increase(quantity)
        if not increased.ok:
            return increased
        return ok(replace(self, stock=increased.value, updated_at=utc_now()))
