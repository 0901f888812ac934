from __future__ import annotations

from datetime import datetime, timezone

import pytest

from clean_store.auth import FastPasswordHasher
from clean_store.services.event_dispatcher import InMemoryEventDispatcher
from clean_store.services.in_memory_repositories import InMemoryProductRepository, InMemoryUserRepository
from clean_store.services.opaque_token_auth import OpaqueTokenAuthService


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


class RecordingHandler:
    def __init__(self) -> None:
        self.events = []

    async def __call__(self, event) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.event_type for event in self.events]


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def password_hasher() -> FastPasswordHasher:
    return FastPasswordHasher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_service(user_repository, password_hasher, clock) -> OpaqueTokenAuthService:
    return OpaqueTokenAuthService(user_repository, password_hasher, clock=clock)


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def event_dispatcher(recorder) -> InMemoryEventDispatcher:
    from clean_store.events import ALL_EVENT_TYPES

    dispatcher = InMemoryEventDispatcher()
    for event_type in ALL_EVENT_TYPES:
        dispatcher.subscribe(event_type, recorder)
    return dispatcher
