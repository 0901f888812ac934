"""Product use cases."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from pydantic import field_validator
from pydantic_core import PydanticCustomError

from ..domain_errors import DomainError, NotFoundError, ValidationError
from ..entities import Product
from ..events import (
    ProductCreated,
    ProductDeleted,
    ProductOutOfStock,
    ProductStockIncreased,
    ProductStockReduced,
)
from ..repositories import ProductRepository, UserRepository
from ..result import Result, err, ok
from ..services.event_dispatcher import EventDispatcher, publish
from ..validation import InputSchema, ProductId, UserId, validate_input
from ..value_objects import Money, Stock

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


@dataclass(frozen=True)
class CreatedProduct:
    product_id: str


@dataclass(frozen=True)
class ProductOutput:
    id: str
    name: str
    description: str
    price: Decimal
    currency: str
    stock: int
    is_in_stock: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> ProductOutput:
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price.amount,
            currency=product.price.currency,
            stock=product.stock.value,
            is_in_stock=product.is_in_stock(),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


@dataclass(frozen=True)
class ProductListItem:
    id: str
    name: str
    price: Decimal
    currency: str
    stock: int
    is_in_stock: bool

    @classmethod
    def from_product(cls, product: Product) -> ProductListItem:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price.amount,
            currency=product.price.currency,
            stock=product.stock.value,
            is_in_stock=product.is_in_stock(),
        )


class CreateProductInput(InputSchema):
    name: str
    description: str = ""
    price: Decimal
    stock: int
    currency: str = "USD"

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("REQUIRED", "Name is required")
        if len(value) > NAME_MAX_LENGTH:
            raise PydanticCustomError(
                "TOO_LONG",
                "Name must be at most {max_length} characters",
                {"max_length": NAME_MAX_LENGTH},
            )
        return value

    @field_validator("description")
    @classmethod
    def check_description(cls, value: str) -> str:
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise PydanticCustomError(
                "TOO_LONG",
                "Description must be at most {max_length} characters",
                {"max_length": DESCRIPTION_MAX_LENGTH},
            )
        return value

    @field_validator("price")
    @classmethod
    def check_price(cls, value: Decimal) -> Decimal:
        if value.is_finite() and value <= 0:
            raise PydanticCustomError("NOT_POSITIVE", "Price must be positive")
        return value


class ProductIdInput(InputSchema):
    product_id: ProductId


class UserProductInput(InputSchema):
    user_id: UserId
    product_id: ProductId


class StockChangeInput(InputSchema):
    product_id: ProductId
    quantity: int


class CreateProduct:
    def __init__(
        self,
        product_repository: ProductRepository,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._products = product_repository
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[CreatedProduct, DomainError]:
        parsed = validate_input(CreateProductInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        price = Money.create(data.price, data.currency)
        stock = Stock.create(data.stock)
        failures = [r.error for r in (price, stock) if not r.ok]
        if failures:
            return err(ValidationError.merge(failures))

        product = Product.create(
            id=str(uuid4()),
            name=data.name,
            description=data.description,
            price=price.value,
            stock=stock.value,
        )
        await self._products.save(product)

        await publish(
            self._events,
            ProductCreated(product.id, {"name": product.name, "price": str(product.price)}),
        )
        return ok(CreatedProduct(product_id=product.id))


class GetProductById:
    def __init__(self, product_repository: ProductRepository) -> None:
        self._products = product_repository

    async def execute(self, raw) -> Result[ProductOutput, DomainError]:
        parsed = validate_input(ProductIdInput, raw)
        if not parsed.ok:
            return parsed
        product_id = parsed.value.product_id

        product = await self._products.find_by_id(product_id)
        if product is None:
            return err(NotFoundError.product(product_id))
        return ok(ProductOutput.from_product(product))


class ListProducts:
    def __init__(self, product_repository: ProductRepository) -> None:
        self._products = product_repository

    async def execute(self, raw=None) -> Result[list[ProductListItem], DomainError]:
        products = await self._products.find_all()
        return ok([ProductListItem.from_product(p) for p in products])


class DeleteProduct:
    def __init__(
        self,
        product_repository: ProductRepository,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._products = product_repository
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[None, DomainError]:
        parsed = validate_input(ProductIdInput, raw)
        if not parsed.ok:
            return parsed
        product_id = parsed.value.product_id

        product = await self._products.find_by_id(product_id)
        if product is None:
            return err(NotFoundError.product(product_id))

        await self._products.delete_by_id(product_id)
        await publish(self._events, ProductDeleted(product_id, {"name": product.name}))
        return ok(None)


class AssociateProductWithUser:
    def __init__(self, user_repository: UserRepository, product_repository: ProductRepository) -> None:
        self._users = user_repository
        self._products = product_repository

    async def execute(self, raw) -> Result[None, DomainError]:
        parsed = validate_input(UserProductInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        if await self._users.find_by_id(data.user_id) is None:
            return err(NotFoundError.user(data.user_id))
        product = await self._products.find_by_id(data.product_id)
        if product is None:
            return err(NotFoundError.product(data.product_id))

        await self._products.associate_with_user(data.product_id, data.user_id, product)
        return ok(None)


class DisassociateProductFromUser:
    def __init__(self, user_repository: UserRepository, product_repository: ProductRepository) -> None:
        self._users = user_repository
        self._products = product_repository

    async def execute(self, raw) -> Result[None, DomainError]:
        parsed = validate_input(UserProductInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        if await self._users.find_by_id(data.user_id) is None:
            return err(NotFoundError.user(data.user_id))
        if await self._products.find_by_id(data.product_id) is None:
            return err(NotFoundError.product(data.product_id))

        await self._products.disassociate_from_user(data.product_id, data.user_id)
        return ok(None)


class ReduceProductStock:
    def __init__(
        self,
        product_repository: ProductRepository,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._products = product_repository
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[ProductOutput, DomainError]:
        parsed = validate_input(StockChangeInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        product = await self._products.find_by_id(data.product_id)
        if product is None:
            return err(NotFoundError.product(data.product_id))

        reduced = product.reduce_stock(data.quantity)
        if not reduced.ok:
            return reduced
        updated = reduced.value
        await self._products.save(updated)

        events = [
            ProductStockReduced(
                updated.id,
                {"quantity": data.quantity, "previousStock": product.stock.value, "newStock": updated.stock.value},
            )
        ]
        if updated.stock.is_empty():
            events.append(ProductOutOfStock(updated.id, {"name": updated.name}))
        await publish(self._events, *events)
        return ok(ProductOutput.from_product(updated))


class IncreaseProductStock:
    def __init__(
        self,
        product_repository: ProductRepository,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._products = product_repository
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[ProductOutput, DomainError]:
        parsed = validate_input(StockChangeInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        product = await self._products.find_by_id(data.product_id)
        if product is None:
            return err(NotFoundError.product(data.product_id))

        increased = product.increase_stock(data.quantity)
        if not increased.ok:
            return increased
        updated = increased.value
        await self._products.save(updated)

        await publish(
            self._events,
            ProductStockIncreased(
                updated.id,
                {"quantity": data.quantity, "previousStock": product.stock.value, "newStock": updated.stock.value},
            ),
        )
        return ok(ProductOutput.from_product(updated))
