"""User use cases."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from ..auth import AuthenticationService, PasswordHasher
from ..domain_errors import ConflictError, DomainError, NotFoundError, ValidationError
from ..entities import User
from ..events import UserDeleted, UserRegistered
from ..repositories import DuplicateKeyError, ProductRepository, UserRepository
from ..result import Result, err, ok
from ..services.event_dispatcher import EventDispatcher, publish
from ..validation import InputSchema, UserId, validate_input
from ..value_objects import Email, Password
from .product_use_cases import ProductOutput


@dataclass(frozen=True)
class RegisteredUser:
    user_id: str


@dataclass(frozen=True)
class UserOutput:
    id: str
    email: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserOutput:
        return cls(id=user.id, email=user.email, created_at=user.created_at)


@dataclass(frozen=True)
class UserWithProducts:
    id: str
    email: str
    created_at: datetime
    products: list[ProductOutput]


class RegisterUserInput(InputSchema):
    email: str
    password: str


class UserIdInput(InputSchema):
    user_id: UserId


class UserEmailInput(InputSchema):
    email: str


class RegisterUser:
    def __init__(
        self,
        user_repository: UserRepository,
        password_hasher: PasswordHasher,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._users = user_repository
        self._hasher = password_hasher
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[RegisteredUser, DomainError]:
        parsed = validate_input(RegisterUserInput, raw)
        if not parsed.ok:
            return parsed
        data = parsed.value

        # Report email and password problems together.
        email_result = Email.create(data.email)
        rules_result = Password.validate_rules(data.password)
        failures = [r.error for r in (email_result, rules_result) if not r.ok]
        if failures:
            return err(ValidationError.merge(failures))
        email = email_result.value

        if await self._users.find_by_email(email.value) is not None:
            return err(ConflictError.email_in_use())

        password = await Password.validate_and_hash_async(data.password, self._hasher.hash)
        if not password.ok:
            return password

        user = User.create(id=str(uuid4()), email=email.value, password_hash=password.value.value)
        try:
            await self._users.save(user)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration.
            return err(ConflictError.email_in_use())

        await publish(self._events, UserRegistered(user.id, {"email": user.email}))
        return ok(RegisteredUser(user_id=user.id))


class GetUserById:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    async def execute(self, raw) -> Result[UserOutput, DomainError]:
        parsed = validate_input(UserIdInput, raw)
        if not parsed.ok:
            return parsed
        user_id = parsed.value.user_id

        user = await self._users.find_by_id(user_id)
        if user is None:
            return err(NotFoundError.user(user_id))
        return ok(UserOutput.from_user(user))


class GetUserByEmail:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    async def execute(self, raw) -> Result[UserOutput, DomainError]:
        parsed = validate_input(UserEmailInput, raw)
        if not parsed.ok:
            return parsed
        email = Email.create(parsed.value.email)
        if not email.ok:
            return email

        user = await self._users.find_by_email(email.value.value)
        if user is None:
            return err(NotFoundError.user_by_email(email.value.value))
        return ok(UserOutput.from_user(user))


class DeleteUser:
    """Delete a user, revoke their tokens and drop their product links.

    Products themselves survive; only the links go away.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        product_repository: ProductRepository | None = None,
        auth_service: AuthenticationService | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._users = user_repository
        self._products = product_repository
        self._auth = auth_service
        self._events = event_dispatcher

    async def execute(self, raw) -> Result[None, DomainError]:
        parsed = validate_input(UserIdInput, raw)
        if not parsed.ok:
            return parsed
        user_id = parsed.value.user_id

        user = await self._users.find_by_id(user_id)
        if user is None:
            return err(NotFoundError.user(user_id))

        linked = await self._products.find_by_user_id(user_id) if self._products else []
        await self._users.delete_by_id(user_id)

        cleanups = [self._products.disassociate_from_user(p.id, user_id) for p in linked]
        if self._auth is not None:
            cleanups.append(self._auth.delete_user(user_id))
        await asyncio.gather(*cleanups)

        await publish(self._events, UserDeleted(user_id, {"email": user.email}))
        return ok(None)


class GetUserWithProducts:
    def __init__(self, user_repository: UserRepository, product_repository: ProductRepository) -> None:
        self._users = user_repository
        self._products = product_repository

    async def execute(self, raw) -> Result[UserWithProducts, DomainError]:
        parsed = validate_input(UserIdInput, raw)
        if not parsed.ok:
            return parsed
        user_id = parsed.value.user_id

        user = await self._users.find_by_id(user_id)
        if user is None:
            return err(NotFoundError.user(user_id))

        products = await self._products.find_by_user_id(user_id)
        return ok(
            UserWithProducts(
                id=user.id,
                email=user.email,
                created_at=user.created_at,
                products=[ProductOutput.from_product(p) for p in products],
            )
        )
