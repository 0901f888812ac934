"""Storage ports the application layer depends on.

Implementations must give read-after-write consistency: a ``save`` is visible
to the next ``find_by_id`` with the same id. Uniqueness (e.g. user email) is
enforced by the storage itself; no application-level locking is done, so two
concurrent registrations for one email both pass the pre-check and the
second ``save`` must fail with ``DuplicateKeyError``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from .entities import Product, User


class DuplicateKeyError(Exception):
    """Raised by storage when a unique key is already taken."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Duplicate value for {field}")
        self.field = field
        self.value = value


class UserRepository(ABC):
    """Repository interface for users."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> User | None:
        """Find a user by id."""

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Find a user by normalized email."""

    @abstractmethod
    async def find_all(self) -> list[User]:
        """List all users."""

    @abstractmethod
    async def save(self, user: User) -> None:
        """Insert or overwrite a user with the same id."""

    @abstractmethod
    async def delete_by_id(self, user_id: str) -> None:
        """Delete a user; absent ids are ignored."""


class ProductRepository(ABC):
    """Repository interface for products and their user links."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product | None:
        """Find a product by id."""

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> list[Product]:
        """List products linked to a user."""

    @abstractmethod
    async def find_all(self) -> list[Product]:
        """List all products."""

    @abstractmethod
    async def save(self, product: Product) -> None:
        """Insert or overwrite a product with the same id."""

    @abstractmethod
    async def delete_by_id(self, product_id: str) -> None:
        """Delete a product and its links; absent ids are ignored."""

    @abstractmethod
    async def associate_with_user(
        self,
        product_id: str,
        user_id: str,
        product: Product | None = None,
    ) -> None:
        """Link a product to a user. ``product`` lets stores that embed documents skip a read."""

    @abstractmethod
    async def disassociate_from_user(self, product_id: str, user_id: str) -> None:
        """Remove a product/user link; missing links are ignored."""
