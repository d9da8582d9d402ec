"""Typed domain events and a small per-server emitter."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    LISTENING = "listening"
    ERROR = "error"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    DENIED = "denied"
    FEED = "feed"


# -----------------------------------------------------------------------
# Payloads
# -----------------------------------------------------------------------


@dataclass
class ListeningEvent:
    port: int
    host: str = ""


@dataclass
class ErrorEvent:
    error: Exception


@dataclass
class SubscriptionIntent:
    """A hub confirmed (or denied) a subscription through a GET callback."""

    mode: str
    topic: str
    hub: Optional[str] = None
    challenge: Optional[str] = None
    lease_expiry: Optional[int] = None  # epoch seconds


@dataclass
class SubscriptionFailure:
    """An outbound subscription request failed and nobody was waiting for it."""

    topic: str
    error: Exception


@dataclass
class NotificationEvent:
    """Content pushed by the hub."""

    topic: str
    hub: Optional[str]
    callback_url: str
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


EventPayload = Union[
    ListeningEvent,
    ErrorEvent,
    SubscriptionIntent,
    SubscriptionFailure,
    NotificationEvent,
]
Handler = Callable[[Any], Union[None, Awaitable[None]]]

_PAYLOAD_TYPES = {
    EventKind.LISTENING: (ListeningEvent,),
    EventKind.ERROR: (ErrorEvent,),
    EventKind.SUBSCRIBE: (SubscriptionIntent,),
    EventKind.UNSUBSCRIBE: (SubscriptionIntent,),
    EventKind.DENIED: (SubscriptionIntent, SubscriptionFailure),
    EventKind.FEED: (NotificationEvent,),
}


# -----------------------------------------------------------------------
# Emitter
# -----------------------------------------------------------------------


class EventEmitter:
    """Registry of handlers keyed by :class:`EventKind`.

    Handlers may be plain callables or coroutine functions. A failing
    handler is logged and does not prevent the remaining handlers from
    running.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, List[Handler]] = {kind: [] for kind in EventKind}

    def on(self, kind: Union[EventKind, str], handler: Handler) -> Handler:
        """Register *handler* for *kind*. Returns the handler (usable as a decorator)."""
        self._handlers[EventKind(kind)].append(handler)
        return handler

    def off(self, kind: Union[EventKind, str], handler: Handler) -> bool:
        """Remove a handler. Returns True if it was registered."""
        handlers = self._handlers[EventKind(kind)]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handlers(self, kind: Union[EventKind, str]) -> List[Handler]:
        return list(self._handlers[EventKind(kind)])

    async def emit(self, kind: Union[EventKind, str], payload: EventPayload) -> int:
        """Deliver *payload* to every handler of *kind*. Returns the handler count."""
        kind = EventKind(kind)
        if not isinstance(payload, _PAYLOAD_TYPES[kind]):
            raise TypeError(f"{type(payload).__name__} is not a valid payload for '{kind.value}'")

        handlers = self.handlers(kind)
        for handler in handlers:
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Handler for '{kind.value}' event failed: {e}", exc_info=True)
        return len(handlers)
