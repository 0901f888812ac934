"""Composition root: builds adapters and use cases from settings."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from .auth import AuthenticationService, BcryptPasswordHasher, FastPasswordHasher, PasswordHasher
from .config import DEFAULT_JWT_SECRET, Settings
from .database import create_engine, create_session_factory, init_models
from .events import ALL_EVENT_TYPES
from .repositories import ProductRepository, UserRepository
from .services.event_dispatcher import InMemoryEventDispatcher, log_event
from .services.in_memory_repositories import InMemoryProductRepository, InMemoryUserRepository
from .services.jwt_auth import JwtAuthService
from .services.opaque_token_auth import OpaqueTokenAuthService
from .services.sqlalchemy_repositories import SqlAlchemyProductRepository, SqlAlchemyUserRepository
from .use_cases import (
    AssociateProductWithUser,
    CreateProduct,
    DeleteProduct,
    DeleteUser,
    DisassociateProductFromUser,
    GetAuthenticatedUser,
    GetProductById,
    GetUserByEmail,
    GetUserById,
    GetUserWithProducts,
    IncreaseProductStock,
    ListProducts,
    LoginUser,
    LogoutUser,
    ReduceProductStock,
    RegisterUser,
)

logger = logging.getLogger(__name__)


@dataclass
class Container:
    user_repository: UserRepository
    product_repository: ProductRepository
    password_hasher: PasswordHasher
    auth_service: AuthenticationService
    event_dispatcher: InMemoryEventDispatcher
    engine: AsyncEngine | None = None

    register_user: RegisterUser = field(init=False)
    get_user_by_id: GetUserById = field(init=False)
    get_user_by_email: GetUserByEmail = field(init=False)
    delete_user: DeleteUser = field(init=False)
    get_user_with_products: GetUserWithProducts = field(init=False)
    login_user: LoginUser = field(init=False)
    logout_user: LogoutUser = field(init=False)
    get_authenticated_user: GetAuthenticatedUser = field(init=False)
    create_product: CreateProduct = field(init=False)
    get_product_by_id: GetProductById = field(init=False)
    list_products: ListProducts = field(init=False)
    delete_product: DeleteProduct = field(init=False)
    associate_product_with_user: AssociateProductWithUser = field(init=False)
    disassociate_product_from_user: DisassociateProductFromUser = field(init=False)
    reduce_product_stock: ReduceProductStock = field(init=False)
    increase_product_stock: IncreaseProductStock = field(init=False)

    def __post_init__(self) -> None:
        users = self.user_repository
        products = self.product_repository
        events = self.event_dispatcher

        self.register_user = RegisterUser(users, self.password_hasher, events)
        self.get_user_by_id = GetUserById(users)
        self.get_user_by_email = GetUserByEmail(users)
        self.delete_user = DeleteUser(users, products, self.auth_service, events)
        self.get_user_with_products = GetUserWithProducts(users, products)

        self.login_user = LoginUser(self.auth_service, events)
        self.logout_user = LogoutUser(self.auth_service)
        self.get_authenticated_user = GetAuthenticatedUser(self.auth_service)

        self.create_product = CreateProduct(products, events)
        self.get_product_by_id = GetProductById(products)
        self.list_products = ListProducts(products)
        self.delete_product = DeleteProduct(products, events)
        self.associate_product_with_user = AssociateProductWithUser(users, products)
        self.disassociate_product_from_user = DisassociateProductFromUser(users, products)
        self.reduce_product_stock = ReduceProductStock(products, events)
        self.increase_product_stock = IncreaseProductStock(products, events)

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None


def build_password_hasher(settings: Settings) -> PasswordHasher:
    if settings.PASSWORD_HASHER == "bcrypt":
        return BcryptPasswordHasher()
    if settings.PASSWORD_HASHER == "fast":
        return FastPasswordHasher()
    raise ValueError(f"Unknown PASSWORD_HASHER: {settings.PASSWORD_HASHER}")


def build_auth_service(
    settings: Settings,
    user_repository: UserRepository,
    password_hasher: PasswordHasher,
) -> AuthenticationService:
    token_ttl = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    if settings.AUTH_PROVIDER == "inmemory":
        return OpaqueTokenAuthService(user_repository, password_hasher, token_ttl=token_ttl)
    if settings.AUTH_PROVIDER == "jwt":
        if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET_KEY is the development default; set a real secret")
        return JwtAuthService(
            user_repository,
            password_hasher,
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            token_ttl=token_ttl,
        )
    raise ValueError(f"Unknown AUTH_PROVIDER: {settings.AUTH_PROVIDER}")


async def build_container(settings: Settings) -> Container:
    """Wire adapters selected by settings into a ready container."""
    engine = None
    if settings.REPOSITORY_TYPE == "inmemory":
        user_repository: UserRepository = InMemoryUserRepository()
        product_repository: ProductRepository = InMemoryProductRepository()
    elif settings.REPOSITORY_TYPE == "sqlalchemy":
        engine = create_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        await init_models(engine)
        session_factory = create_session_factory(engine)
        user_repository = SqlAlchemyUserRepository(session_factory)
        product_repository = SqlAlchemyProductRepository(session_factory)
    else:
        raise ValueError(f"Unknown REPOSITORY_TYPE: {settings.REPOSITORY_TYPE}")

    password_hasher = build_password_hasher(settings)
    auth_service = build_auth_service(settings, user_repository, password_hasher)

    event_dispatcher = InMemoryEventDispatcher()
    for event_type in ALL_EVENT_TYPES:
        event_dispatcher.subscribe(event_type, log_event)

    logger.info(
        "Container ready (repository=%s, auth=%s, hasher=%s)",
        settings.REPOSITORY_TYPE,
        settings.AUTH_PROVIDER,
        settings.PASSWORD_HASHER,
    )
    return Container(
        user_repository=user_repository,
        product_repository=product_repository,
        password_hasher=password_hasher,
        auth_service=auth_service,
        event_dispatcher=event_dispatcher,
        engine=engine,
    )


def get_container(request: Request) -> Container:
    """FastAPI dependency returning the app's container."""
    return request.app.state.container
