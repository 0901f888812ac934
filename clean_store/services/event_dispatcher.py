"""Domain event dispatching."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable

from ..events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher(ABC):
    @abstractmethod
    async def dispatch(self, event: DomainEvent) -> None:
        """Deliver one event to its subscribers."""

    @abstractmethod
    async def dispatch_all(self, events: Iterable[DomainEvent]) -> None:
        """Deliver events in order."""


class InMemoryEventDispatcher(EventDispatcher):
    """Process-local dispatcher.

    Handlers for one event run concurrently and ``dispatch`` returns once all
    of them have settled. A failing handler propagates after the others finish.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type] = [*self._handlers.get(event_type, []), handler]

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type] = [h for h in self._handlers.get(event_type, []) if h is not handler]

    def get_handlers(self, event_type: str) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def clear(self) -> None:
        self._handlers.clear()

    async def dispatch(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(event.event_type, [])
        if not handlers:
            return
        outcomes = await asyncio.gather(*(h(event) for h in handlers), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    async def dispatch_all(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            await self.dispatch(event)


async def publish(dispatcher: EventDispatcher | None, *events: DomainEvent) -> None:
    if dispatcher is not None and events:
        await dispatcher.dispatch_all(events)


async def log_event(event: DomainEvent) -> None:
    logger.info("Domain event %s for %s", event.event_type, event.aggregate_id)
