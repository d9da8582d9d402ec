"""Tests for the typed event emitter."""

import pytest

from pubsubhub.events import (
    EventEmitter,
    EventKind,
    ListeningEvent,
    NotificationEvent,
    SubscriptionFailure,
    SubscriptionIntent,
)


@pytest.fixture()
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.mark.asyncio
async def test_emit_calls_sync_and_async_handlers(emitter):
    seen = []

    def sync_handler(payload):
        seen.append(("sync", payload.port))

    async def async_handler(payload):
        seen.append(("async", payload.port))

    emitter.on(EventKind.LISTENING, sync_handler)
    emitter.on("listening", async_handler)

    count = await emitter.emit(EventKind.LISTENING, ListeningEvent(port=3000))
    assert count == 2
    assert seen == [("sync", 3000), ("async", 3000)]


@pytest.mark.asyncio
async def test_off_removes_handler(emitter):
    seen = []
    handler = emitter.on(EventKind.FEED, seen.append)
    assert emitter.off(EventKind.FEED, handler) is True
    assert emitter.off(EventKind.FEED, handler) is False
    event = NotificationEvent(topic="t", hub=None, callback_url="http://x/", body="")
    assert await emitter.emit(EventKind.FEED, event) == 0
    assert seen == []


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others(emitter):
    seen = []

    def broken(payload):
        raise RuntimeError("boom")

    emitter.on(EventKind.SUBSCRIBE, broken)
    emitter.on(EventKind.SUBSCRIBE, seen.append)
    intent = SubscriptionIntent(mode="subscribe", topic="t")
    await emitter.emit(EventKind.SUBSCRIBE, intent)
    assert seen == [intent]


@pytest.mark.asyncio
async def test_denied_accepts_intent_and_failure(emitter):
    seen = []
    emitter.on(EventKind.DENIED, seen.append)
    await emitter.emit(EventKind.DENIED, SubscriptionIntent(mode="denied", topic="t"))
    await emitter.emit(EventKind.DENIED, SubscriptionFailure(topic="t", error=ValueError("x")))
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_wrong_payload_type_raises(emitter):
    with pytest.raises(TypeError, match="not a valid payload"):
        await emitter.emit(EventKind.FEED, ListeningEvent(port=1))


def test_unknown_kind_raises(emitter):
    with pytest.raises(ValueError):
        emitter.on("bogus", lambda payload: None)
