from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from clean_store.domain_errors import InvalidOperationError, NotFoundError, ValidationError
from clean_store.use_cases import (
    AssociateProductWithUser,
    CreateProduct,
    DeleteProduct,
    DisassociateProductFromUser,
    GetProductById,
    IncreaseProductStock,
    ListProducts,
    ReduceProductStock,
    RegisterUser,
)


async def _create(product_repository, **overrides) -> str:
    payload = {"name": "Widget", "description": "A widget", "price": 10.999, "stock": 5, **overrides}
    return (await CreateProduct(product_repository).execute(payload)).unwrap().product_id


@pytest.mark.asyncio
async def test_create_product_rounds_price(product_repository, event_dispatcher, recorder) -> None:
    result = await CreateProduct(product_repository, event_dispatcher).execute(
        {"name": "Widget", "price": 10.999, "stock": 5}
    )

    product = await product_repository.find_by_id(result.unwrap().product_id)
    assert product.price.amount == Decimal("11.00")
    assert product.price.currency == "USD"
    assert product.description == ""
    assert recorder.types == ["PRODUCT_CREATED"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "field", "code"),
    [
        ({"price": 1, "stock": 1}, "name", "REQUIRED"),
        ({"name": "  ", "price": 1, "stock": 1}, "name", "REQUIRED"),
        ({"name": "x" * 256, "price": 1, "stock": 1}, "name", "TOO_LONG"),
        ({"name": "W", "description": "d" * 1001, "price": 1, "stock": 1}, "description", "TOO_LONG"),
        ({"name": "W", "price": 0, "stock": 1}, "price", "NOT_POSITIVE"),
        ({"name": "W", "price": 1, "stock": 1.5}, "stock", "INT_FROM_FLOAT"),
        ({"name": "W", "price": 1, "stock": -1}, "stock", "NEGATIVE"),
        ({"name": "W", "price": 1, "stock": 1, "currency": "XYZ"}, "currency", "INVALID"),
    ],
)
async def test_create_product_validation(product_repository, payload, field, code) -> None:
    result = await CreateProduct(product_repository).execute(payload)

    assert isinstance(result.error, ValidationError)
    assert (result.error.fields[0].field, result.error.fields[0].code) == (field, code)
    assert await product_repository.find_all() == []


@pytest.mark.asyncio
async def test_create_product_reports_stock_and_currency_together(product_repository) -> None:
    result = await CreateProduct(product_repository).execute(
        {"name": "W", "price": 1, "stock": -1, "currency": "XYZ"}
    )
    assert {f.field for f in result.error.fields} == {"currency", "stock"}


@pytest.mark.asyncio
async def test_get_product_by_id(product_repository) -> None:
    product_id = await _create(product_repository)

    output = (await GetProductById(product_repository).execute({"product_id": product_id})).unwrap()
    assert (output.name, output.price, output.stock, output.is_in_stock) == ("Widget", Decimal("11.00"), 5, True)

    missing = await GetProductById(product_repository).execute({"product_id": str(uuid.uuid4())})
    assert isinstance(missing.error, NotFoundError)


@pytest.mark.asyncio
async def test_list_products(product_repository) -> None:
    await _create(product_repository, name="First")
    await _create(product_repository, name="Second", stock=0)

    items = (await ListProducts(product_repository).execute()).unwrap()

    assert [(i.name, i.is_in_stock) for i in items] == [("First", True), ("Second", False)]


@pytest.mark.asyncio
async def test_delete_product_twice(product_repository, event_dispatcher, recorder) -> None:
    product_id = await _create(product_repository)
    use_case = DeleteProduct(product_repository, event_dispatcher)

    assert (await use_case.execute({"product_id": product_id})).ok
    assert (await use_case.execute({"product_id": product_id})).error.code == "NOT_FOUND"
    assert recorder.types == ["PRODUCT_DELETED"]


@pytest.mark.asyncio
async def test_reduce_stock_to_zero_emits_out_of_stock(product_repository, event_dispatcher, recorder) -> None:
    product_id = await _create(product_repository, stock=3)

    output = (
        await ReduceProductStock(product_repository, event_dispatcher).execute(
            {"product_id": product_id, "quantity": 3}
        )
    ).unwrap()

    assert output.stock == 0
    assert not output.is_in_stock
    assert (await product_repository.find_by_id(product_id)).stock.value == 0
    assert recorder.types == ["PRODUCT_STOCK_REDUCED", "PRODUCT_OUT_OF_STOCK"]
    assert recorder.events[0].payload == {"quantity": 3, "previousStock": 3, "newStock": 0}


@pytest.mark.asyncio
async def test_reduce_stock_beyond_available(product_repository) -> None:
    product_id = await _create(product_repository, stock=5)

    result = await ReduceProductStock(product_repository).execute({"product_id": product_id, "quantity": 6})

    assert isinstance(result.error, InvalidOperationError)
    assert result.error.http_status == 422
    assert (await product_repository.find_by_id(product_id)).stock.value == 5


@pytest.mark.asyncio
async def test_increase_stock(product_repository, event_dispatcher, recorder) -> None:
    product_id = await _create(product_repository, stock=0)
    use_case = IncreaseProductStock(product_repository, event_dispatcher)

    output = (await use_case.execute({"productId": product_id, "quantity": 4})).unwrap()
    assert output.stock == 4
    assert recorder.types == ["PRODUCT_STOCK_INCREASED"]

    negative = await use_case.execute({"product_id": product_id, "quantity": -1})
    assert isinstance(negative.error, ValidationError)

    missing = await use_case.execute({"product_id": str(uuid.uuid4()), "quantity": 1})
    assert missing.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_associate_checks_user_before_product(user_repository, product_repository, password_hasher) -> None:
    user_id = (
        await RegisterUser(user_repository, password_hasher).execute(
            {"email": "alice@example.com", "password": "password123"}
        )
    ).unwrap().user_id
    product_id = await _create(product_repository)
    associate = AssociateProductWithUser(user_repository, product_repository)

    no_user = await associate.execute({"user_id": str(uuid.uuid4()), "product_id": str(uuid.uuid4())})
    assert no_user.error.message.startswith("User with id")

    no_product = await associate.execute({"user_id": user_id, "product_id": str(uuid.uuid4())})
    assert no_product.error.message.startswith("Product with id")

    assert (await associate.execute({"user_id": user_id, "product_id": product_id})).ok
    assert (await associate.execute({"user_id": user_id, "product_id": product_id})).ok
    assert [p.id for p in await product_repository.find_by_user_id(user_id)] == [product_id]

    disassociate = DisassociateProductFromUser(user_repository, product_repository)
    assert (await disassociate.execute({"user_id": user_id, "product_id": product_id})).ok
    assert await product_repository.find_by_user_id(user_id) == []
