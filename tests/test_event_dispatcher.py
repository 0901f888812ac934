from __future__ import annotations

import asyncio

import pytest

from clean_store.events import ProductCreated, UserDeleted, UserRegistered
from clean_store.services.event_dispatcher import InMemoryEventDispatcher, publish


@pytest.mark.asyncio
async def test_dispatch_reaches_every_subscriber_of_the_type(recorder) -> None:
    dispatcher = InMemoryEventDispatcher()
    other = []

    async def second(event) -> None:
        other.append(event.aggregate_id)

    dispatcher.subscribe(UserRegistered.event_type, recorder)
    dispatcher.subscribe(UserRegistered.event_type, second)

    await dispatcher.dispatch(UserRegistered("u-1"))
    await dispatcher.dispatch(ProductCreated("p-1"))

    assert recorder.types == ["USER_REGISTERED"]
    assert other == ["u-1"]


@pytest.mark.asyncio
async def test_handlers_run_concurrently() -> None:
    dispatcher = InMemoryEventDispatcher()
    started = asyncio.Event()
    order = []

    async def waits(event) -> None:
        await started.wait()
        order.append("waits")

    async def signals(event) -> None:
        order.append("signals")
        started.set()

    dispatcher.subscribe(UserDeleted.event_type, waits)
    dispatcher.subscribe(UserDeleted.event_type, signals)

    await asyncio.wait_for(dispatcher.dispatch(UserDeleted("u-1")), timeout=1)
    assert order == ["signals", "waits"]


@pytest.mark.asyncio
async def test_failing_handler_propagates_after_others_finish(recorder) -> None:
    dispatcher = InMemoryEventDispatcher()

    async def broken(event) -> None:
        raise RuntimeError("handler failed")

    dispatcher.subscribe(UserRegistered.event_type, broken)
    dispatcher.subscribe(UserRegistered.event_type, recorder)

    with pytest.raises(RuntimeError, match="handler failed"):
        await dispatcher.dispatch(UserRegistered("u-1"))
    assert recorder.types == ["USER_REGISTERED"]


@pytest.mark.asyncio
async def test_unsubscribe_and_clear(recorder) -> None:
    dispatcher = InMemoryEventDispatcher()
    dispatcher.subscribe(UserRegistered.event_type, recorder)
    dispatcher.unsubscribe(UserRegistered.event_type, recorder)

    await dispatcher.dispatch(UserRegistered("u-1"))
    assert recorder.events == []
    assert dispatcher.get_handlers(UserRegistered.event_type) == []

    dispatcher.subscribe(UserRegistered.event_type, recorder)
    dispatcher.clear()
    assert dispatcher.get_handlers(UserRegistered.event_type) == []


@pytest.mark.asyncio
async def test_publish_keeps_order_and_tolerates_missing_dispatcher(event_dispatcher, recorder) -> None:
    await publish(None, UserRegistered("u-1"))
    await publish(event_dispatcher, UserRegistered("u-1"), UserDeleted("u-1"))
    assert recorder.types == ["USER_REGISTERED", "USER_DELETED"]
