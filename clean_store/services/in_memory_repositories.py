"""In-process repositories for tests and demos.

State lives in plain dicts without locking: safe under cooperative asyncio
scheduling in a single process only.
"""
from __future__ import annotations

from ..entities import Product, User
from ..repositories import DuplicateKeyError, ProductRepository, UserRepository


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self._users_by_id: dict[str, User] = {}
        self._ids_by_email: dict[str, str] = {}

    async def find_by_id(self, user_id: str) -> User | None:
        return self._users_by_id.get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        user_id = self._ids_by_email.get(email)
        return self._users_by_id.get(user_id) if user_id else None

    async def find_all(self) -> list[User]:
        return list(self._users_by_id.values())

    async def save(self, user: User) -> None:
        owner_id = self._ids_by_email.get(user.email)
        if owner_id is not None and owner_id != user.id:
            raise DuplicateKeyError("email", user.email)

        previous = self._users_by_id.get(user.id)
        if previous is not None and previous.email != user.email:
            self._ids_by_email.pop(previous.email, None)
        self._users_by_id[user.id] = user
        self._ids_by_email[user.email] = user.id

    async def delete_by_id(self, user_id: str) -> None:
        user = self._users_by_id.pop(user_id, None)
        if user is not None:
            self._ids_by_email.pop(user.email, None)

    def clear(self) -> None:
        self._users_by_id.clear()
        self._ids_by_email.clear()


class InMemoryProductRepository(ProductRepository):
    def __init__(self) -> None:
        self._products_by_id: dict[str, Product] = {}
        self._product_ids_by_user: dict[str, list[str]] = {}

    async def find_by_id(self, product_id: str) -> Product | None:
        return self._products_by_id.get(product_id)

    async def find_by_user_id(self, user_id: str) -> list[Product]:
        return [
            self._products_by_id[pid]
            for pid in self._product_ids_by_user.get(user_id, [])
            if pid in self._products_by_id
        ]

    async def find_all(self) -> list[Product]:
        return list(self._products_by_id.values())

    async def save(self, product: Product) -> None:
        self._products_by_id[product.id] = product

    async def delete_by_id(self, product_id: str) -> None:
        self._products_by_id.pop(product_id, None)
        for product_ids in self._product_ids_by_user.values():
            if product_id in product_ids:
                product_ids.remove(product_id)

    async def associate_with_user(
        self,
        product_id: str,
        user_id: str,
        product: Product | None = None,
    ) -> None:
        if product is not None and product_id not in self._products_by_id:
            self._products_by_id[product_id] = product
        product_ids = self._product_ids_by_user.setdefault(user_id, [])
        if product_id not in product_ids:
            product_ids.append(product_id)

    async def disassociate_from_user(self, product_id: str, user_id: str) -> None:
        product_ids = self._product_ids_by_user.get(user_id)
        if product_ids and product_id in product_ids:
            product_ids.remove(product_id)

    def clear(self) -> None:
        self._products_by_id.clear()
        self._product_ids_by_user.clear()
