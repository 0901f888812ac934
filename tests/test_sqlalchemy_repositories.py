from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio

from clean_store.database import create_engine, create_session_factory, init_models
from clean_store.entities import Product, User
from clean_store.repositories import DuplicateKeyError
from clean_store.services.sqlalchemy_repositories import SqlAlchemyProductRepository, SqlAlchemyUserRepository
from clean_store.value_objects import Money, Stock


@pytest_asyncio.fixture
async def session_factory():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await init_models(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def users(session_factory) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(session_factory)


@pytest.fixture
def products(session_factory) -> SqlAlchemyProductRepository:
    return SqlAlchemyProductRepository(session_factory)


def _user(email: str = "alice@example.com") -> User:
    return User.create(
        id=str(uuid.uuid4()),
        email=email,
        password_hash="hash",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _product(name: str = "Widget", stock: int = 5) -> Product:
    return Product.create(
        id=str(uuid.uuid4()),
        name=name,
        description="",
        price=Money.create(Decimal("19.99"), "EUR").unwrap(),
        stock=Stock.create(stock).unwrap(),
    )


@pytest.mark.asyncio
async def test_user_round_trip_and_lookup_by_email(users) -> None:
    user = _user()
    await users.save(user)

    by_id = await users.find_by_id(user.id)
    by_email = await users.find_by_email("alice@example.com")

    assert by_id == user
    assert by_email.id == user.id
    assert await users.find_by_email("bob@example.com") is None


@pytest.mark.asyncio
async def test_save_is_an_upsert(users) -> None:
    user = _user()
    await users.save(user)
    await users.save(User.create(id=user.id, email=user.email, password_hash="rehashed", created_at=user.created_at))

    assert len(await users.find_all()) == 1
    assert (await users.find_by_id(user.id)).password_hash == "rehashed"


@pytest.mark.asyncio
async def test_duplicate_email_raises_duplicate_key(users) -> None:
    await users.save(_user())

    with pytest.raises(DuplicateKeyError):
        await users.save(_user())


@pytest.mark.asyncio
async def test_delete_user_is_noop_when_absent(users) -> None:
    user = _user()
    await users.save(user)

    await users.delete_by_id(user.id)
    await users.delete_by_id(user.id)

    assert await users.find_by_id(user.id) is None


@pytest.mark.asyncio
async def test_product_round_trip_keeps_money_and_stock(products) -> None:
    product = _product()
    await products.save(product)

    loaded = await products.find_by_id(product.id)

    assert loaded.price == Money.create(Decimal("19.99"), "EUR").unwrap()
    assert loaded.stock.value == 5
    assert loaded.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_product_links(users, products) -> None:
    user = _user()
    kept = _product("Kept")
    dropped = _product("Dropped")
    await users.save(user)
    await products.save(kept)
    await products.save(dropped)

    await products.associate_with_user(kept.id, user.id)
    await products.associate_with_user(kept.id, user.id)
    await products.associate_with_user(dropped.id, user.id)
    await products.disassociate_from_user(dropped.id, user.id)

    assert [p.name for p in await products.find_by_user_id(user.id)] == ["Kept"]

    await products.delete_by_id(kept.id)
    assert await products.find_by_user_id(user.id) == []
    assert [p.name for p in await products.find_all()] == ["Dropped"]


@pytest.mark.asyncio
async def test_deleting_user_keeps_products(users, products) -> None:
    user = _user()
    product = _product()
    await users.save(user)
    await products.save(product)
    await products.associate_with_user(product.id, user.id)

    await users.delete_by_id(user.id)

    assert await products.find_by_user_id(user.id) == []
    assert await products.find_by_id(product.id) is not None
