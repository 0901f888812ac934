"""SQLAlchemy (async) implementations of the repository ports.

Each call runs in its own session and transaction, so a committed ``save``
is visible to the next read.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..entities import Product, User
from ..models import ProductModel, UserModel, user_products
from ..repositories import DuplicateKeyError, ProductRepository, UserRepository
from ..value_objects import Money, Stock

logger = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "unique" in str(exc.orig).lower()


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, user_id: str) -> User | None:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user_id)
            return self._map_to_domain(model) if model else None

    async def find_by_email(self, email: str) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            model = result.scalar_one_or_none()
            return self._map_to_domain(model) if model else None

    async def find_all(self) -> list[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(UserModel).order_by(UserModel.created_at))
            return [self._map_to_domain(model) for model in result.scalars().all()]

    async def save(self, user: User) -> None:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    await session.merge(self._map_to_model(user))
            except IntegrityError as exc:
                if _is_unique_violation(exc):
                    raise DuplicateKeyError("email", user.email) from exc
                raise
        logger.debug("Saved user %s", user.id)

    async def delete_by_id(self, user_id: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(user_products).where(user_products.c.user_id == user_id))
                result = await session.execute(delete(UserModel).where(UserModel.id == user_id))
        if result.rowcount:
            logger.info("Deleted user %s", user_id)

    def _map_to_domain(self, model: UserModel) -> User:
        return User.create(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            created_at=_as_utc(model.created_at),
        )

    def _map_to_model(self, user: User) -> UserModel:
        return UserModel(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )


class SqlAlchemyProductRepository(ProductRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_id(self, product_id: str) -> Product | None:
        async with self._session_factory() as session:
            model = await session.get(ProductModel, product_id)
            return self._map_to_domain(model) if model else None

    async def find_by_user_id(self, user_id: str) -> list[Product]:
        stmt = (
            select(ProductModel)
            .join(user_products, user_products.c.product_id == ProductModel.id)
            .where(user_products.c.user_id == user_id)
            .order_by(ProductModel.created_at)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._map_to_domain(model) for model in result.scalars().all()]

    async def find_all(self) -> list[Product]:
        async with self._session_factory() as session:
            result = await session.execute(select(ProductModel).order_by(ProductModel.created_at))
            return [self._map_to_domain(model) for model in result.scalars().all()]

    async def save(self, product: Product) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.merge(self._map_to_model(product))
        logger.debug("Saved product %s", product.id)

    async def delete_by_id(self, product_id: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(user_products).where(user_products.c.product_id == product_id))
                result = await session.execute(delete(ProductModel).where(ProductModel.id == product_id))
        if result.rowcount:
            logger.info("Deleted product %s", product_id)

    async def associate_with_user(
        self,
        product_id: str,
        user_id: str,
        product: Product | None = None,
    ) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                existing = await session.execute(
                    select(user_products.c.product_id).where(
                        user_products.c.product_id == product_id,
                        user_products.c.user_id == user_id,
                    )
                )
                if existing.first() is None:
                    await session.execute(user_products.insert().values(product_id=product_id, user_id=user_id))

    async def disassociate_from_user(self, product_id: str, user_id: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    delete(user_products).where(
                        user_products.c.product_id == product_id,
                        user_products.c.user_id == user_id,
                    )
                )

    def _map_to_domain(self, model: ProductModel) -> Product:
        # Rows were validated on the way in.
        return Product.create(
            id=model.id,
            name=model.name,
            description=model.description or "",
            price=Money.create(Decimal(str(model.price)), model.currency).unwrap(),
            stock=Stock.create(model.stock).unwrap(),
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
        )

    def _map_to_model(self, product: Product) -> ProductModel:
        return ProductModel(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price.amount,
            currency=product.price.currency,
            stock=product.stock.value,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
