"""Domain events: facts about something that already happened."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

from .entities import utc_now


@dataclass(frozen=True)
class DomainEvent:
    event_type: ClassVar[str] = "DOMAIN_EVENT"

    aggregate_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventType": self.event_type,
            "aggregateId": self.aggregate_id,
            "occurredAt": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
        }


class UserRegistered(DomainEvent):
    event_type = "USER_REGISTERED"


class UserLoggedIn(DomainEvent):
    event_type = "USER_LOGGED_IN"


class UserDeleted(DomainEvent):
    event_type = "USER_DELETED"


class ProductCreated(DomainEvent):
    event_type = "PRODUCT_CREATED"


class ProductDeleted(DomainEvent):
    event_type = "PRODUCT_DELETED"


class ProductStockReduced(DomainEvent):
    event_type = "PRODUCT_STOCK_REDUCED"


class ProductStockIncreased(DomainEvent):
    event_type = "PRODUCT_STOCK_INCREASED"


class ProductOutOfStock(DomainEvent):
    event_type = "PRODUCT_OUT_OF_STOCK"


ALL_EVENT_TYPES: tuple[str, ...] = tuple(
    cls.event_type
    for cls in (
        UserRegistered,
        UserLoggedIn,
        UserDeleted,
        ProductCreated,
        ProductDeleted,
        ProductStockReduced,
        ProductStockIncreased,
        ProductOutOfStock,
    )
)
