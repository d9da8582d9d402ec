"""Subscriber server: callback endpoint, hub client and events in one object."""

from __future__ import annotations

import errno
import logging
import socket
from typing import Optional

import httpx
import uvicorn

from pubsubhub._base import DEFAULT_HOST, DEFAULT_PORT
from pubsubhub.client import CompletionCallback, HubClient
from pubsubhub.config import HubServerConfig
from pubsubhub.endpoint import create_app
from pubsubhub.events import ErrorEvent, EventEmitter, EventKind, Handler, ListeningEvent
from pubsubhub.exceptions import ListenError

logger = logging.getLogger(__name__)


class PubSubHubBubServer:
    """A WebSub subscriber.

    Usage::

        server = PubSubHubBubServer(HubServerConfig(callback_url="https://me.example/cb", secret="s3cret"))
        server.on(EventKind.FEED, lambda event: print(event.topic, len(event.body)))
        await server.subscribe("https://blog.example/feed", "https://hub.example/")
        await server.listen(3000)
    """

    def __init__(
        self,
        config: Optional[HubServerConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or HubServerConfig()
        self.events = EventEmitter()
        self.app = create_app(self.config, self.events)
        self.client = HubClient(self.config, self.events, http_client=http_client)
        self.port: Optional[int] = None
        self._server: Optional[uvicorn.Server] = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, kind: EventKind, handler: Handler) -> Handler:
        return self.events.on(kind, handler)

    def off(self, kind: EventKind, handler: Handler) -> bool:
        return self.events.off(kind, handler)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    async def subscribe(
        self,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        await self.client.subscribe(topic, hub, callback_url, on_complete)

    async def unsubscribe(
        self,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        await self.client.unsubscribe(topic, hub, callback_url, on_complete)

    async def set_subscription(
        self,
        action: str,
        topic: str,
        hub: str,
        callback_url: Optional[str] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        await self.client.set_subscription(action, topic, hub, callback_url, on_complete)

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------

    def _bind(self, host: str, port: int) -> socket.socket:
        sock = socket.socket(socket.AF_INET6 if ":" in host else socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(128)
        except OSError:
            sock.close()
            raise
        sock.setblocking(False)
        return sock

    async def listen(self, port: int = DEFAULT_PORT, host: str = DEFAULT_HOST, log_level: str = "info") -> None:
        """Serve the callback endpoint until :meth:`close` is called.

        A bind failure is reported through the ``error`` event rather than
        raised.
        """
        self.port = port
        try:
            sock = self._bind(host, port)
        except OSError as e:
            error = ListenError(port, errno.errorcode.get(e.errno, e.errno))
            error.__cause__ = e
            logger.error(str(error))
            await self.events.emit(EventKind.ERROR, ErrorEvent(error=error))
            return

        self._server = uvicorn.Server(uvicorn.Config(self.app, log_level=log_level))
        logger.info(f"Listening on {host}:{port}")
        await self.events.emit(EventKind.LISTENING, ListeningEvent(port=port, host=host))
        try:
            await self._server.serve(sockets=[sock])
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            await self.events.emit(EventKind.ERROR, ErrorEvent(error=e))
        finally:
            sock.close()
            self._server = None

    async def close(self) -> None:
        """Stop serving and release the outbound HTTP client."""
        if self._server is not None:
            self._server.should_exit = True
        await self.client.close()
