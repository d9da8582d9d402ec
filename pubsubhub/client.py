"""Hub client: subscribe/unsubscribe requests (uses httpx.AsyncClient)."""

from __future__ import annotations

import inspect
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generator, Optional, Union
from urllib.parse import quote

import httpx

from pubsubhub._base import DEFAULT_TIMEOUT
from pubsubhub.config import HubAuth, HubServerConfig
from pubsubhub.events import EventEmitter, EventKind, SubscriptionFailure
from pubsubhub.exceptions import HubTransportError, SubscriptionError, UnexpectedHubStatus
from pubsubhub.signature import sign_payload

logger = logging.getLogger(__name__)

SUBSCRIPTION_ACTIONS = frozenset({"subscribe", "unsubscribe"})
SUCCESS_STATUSES = frozenset({202, 204})

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

CompletionCallback = Callable[[Optional[Exception], Optional[str]], Union[None, Awaitable[None]]]


# -----------------------------------------------------------------------
# Request building
# -----------------------------------------------------------------------


def _encode_component(value: str) -> str:
    """Percent-encode like JavaScript's ``encodeURIComponent``."""
    return quote(value, safe="!*'()")


def build_callback_url(base_url: str, topic: str, hub: str) -> str:
    """Append ``topic`` and ``hub`` to the configured callback base URL."""
    separator = "" if "/" in _SCHEME_RE.sub("", base_url) else "/"
    joiner = "&" if "?" in base_url else "?"
    return (
        f"{base_url}{separator}{joiner}"
        f"topic={_encode_component(topic)}&hub={_encode_component(hub)}"
    )


@dataclass
class OutboundSubscriptionForm:
    callback: str
    mode: str
    topic: str
    verify: str = "async"
    secret: Optional[str] = None

    def as_form(self) -> Dict[str, str]:
        form = {
            "hub.callback": self.callback,
            "hub.mode": self.mode,
            "hub.topic": self.topic,
            "hub.verify": self.verify,
        }
        if self.secret:
            form["hub.secret"] = self.secret
        return form


def build_subscription_form(
    action: str,
    topic: str,
    callback_url: str,
    secret: Optional[str] = None,
) -> OutboundSubscriptionForm:
    """Build the form for one hub request; ``hub.secret`` is HMAC-SHA1(topic)."""
    return OutboundSubscriptionForm(
        callback=callback_url,
        mode=action,
        topic=topic,
        secret=sign_payload(topic.encode(), secret, "sha1") if secret else None,
    )


class ChallengeBasicAuth(httpx.Auth):
    """Basic auth that only sends credentials after a 401 Basic challenge."""

    def __init__(self, username: str, password: str) -> None:
        self._basic = httpx.BasicAuth(username, password)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        response = yield request
        challenge = response.headers.get("www-authenticate", "")
        if response.status_code == 401 and challenge.lower().startswith("basic"):
            yield from self._basic.auth_flow(request)


# -----------------------------------------------------------------------
# Client
# -----------------------------------------------------------------------


class HubClient:
    """Sends subscription requests on behalf of one subscriber.

    Usage::

        async with HubClient(HubServerConfig(callback_url="https://me.example/cb")) as client:
            await client.subscribe("https://blog.example/feed", "https://hub.example/")
    """

    def __init__(
        self,
        config: HubServerConfig,
        events: Optional[EventEmitter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = config
        self.events = events or EventEmitter()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._auth = self._build_auth(config.auth)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "HubClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def subscribe(
        self,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        """Ask *hub* to start pushing *topic* to our callback."""
        await self.set_subscription("subscribe", topic, hub, callback_url, on_complete)

    async def unsubscribe(
        self,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        """Ask *hub* to stop pushing *topic* to our callback."""
        await self.set_subscription("unsubscribe", topic, hub, callback_url, on_complete)

    async def set_subscription(
        self,
        action: str,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        """Send one subscription request and report the outcome.

        Failures go to *on_complete* when given, otherwise to a ``denied``
        event. Success only notifies *on_complete*.
        """
        if action not in SUBSCRIPTION_ACTIONS:
            raise ValueError(f"action must be one of {sorted(SUBSCRIPTION_ACTIONS)}, got '{action}'")
        if not topic or not hub:
            raise ValueError("topic and hub are required")

        callback_url = callback_url or build_callback_url(self.config.callback_url, topic, hub)
        form = build_subscription_form(action, topic, callback_url, self.config.secret)

        error = await self._post(hub, form)
        if error is None:
            logger.info(f"Hub accepted {action} request for {topic}")
            await self._complete(on_complete, None, topic)
            return

        logger.warning(f"{action.capitalize()} request for {topic} failed: {error}")
        if on_complete is not None:
            await self._complete(on_complete, error, topic)
        else:
            await self.events.emit(EventKind.DENIED, SubscriptionFailure(topic=topic, error=error))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _build_auth(auth: Optional[HubAuth]) -> Optional[httpx.Auth]:
        if auth is None:
            return None
        return ChallengeBasicAuth(auth.username, auth.password)

    async def _post(self, hub: str, form: OutboundSubscriptionForm) -> Optional[SubscriptionError]:
        kwargs: Dict[str, Any] = {"data": form.as_form()}
        if self._auth is not None:
            kwargs["auth"] = self._auth
        try:
            resp = await self._client.post(hub, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            error = HubTransportError(str(exc) or exc.__class__.__name__)
            error.__cause__ = exc
            return error

        if resp.status_code not in SUCCESS_STATUSES:
            return UnexpectedHubStatus(resp.status_code, resp.text or "")
        return None

    @staticmethod
    async def _complete(
        on_complete: Optional[CompletionCallback],
        error: Optional[Exception],
        topic: Optional[str],
    ) -> None:
        if on_complete is None:
            return
        result = on_complete(error, topic)
        if inspect.isawaitable(result):
            await result
