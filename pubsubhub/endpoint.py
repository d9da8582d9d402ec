"""
Hub callback endpoint.

Hubs call this endpoint twice over a subscription's life: a GET to verify
intent (echo ``hub.challenge``) and POSTs carrying content. Each request is
classified, answered, and only then turned into a domain event.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from pubsubhub._base import _error_page
from pubsubhub.classifier import classify_notification, classify_verification
from pubsubhub.collector import NotificationBodyCollector
from pubsubhub.config import HubServerConfig
from pubsubhub.events import EventEmitter, EventKind, NotificationEvent
from pubsubhub.exceptions import BadRequest, HubRequestError, MethodNotAllowed, PayloadTooLarge

logger = logging.getLogger(__name__)

# Every method is routed to the handler so unsupported ones get our own 405 page.
_ROUTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

_STATUS_MESSAGES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Request Entity Too Large",
    500: "Internal Server Error",
}


def _error_response(status: int, message: str) -> HTMLResponse:
    return HTMLResponse(content=_error_page(status, message), status_code=status)


def _callback_url(request: Request) -> str:
    """Rebuild the URL the hub called: scheme, Host header, path and query."""
    host = request.headers.get("host") or request.url.netloc
    url = f"{request.url.scheme}://{host}{request.url.path}"
    if request.url.query:
        url += f"?{request.url.query}"
    return url


def create_app(config: HubServerConfig, events: EventEmitter) -> FastAPI:
    """Build the callback application for one server instance."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Callback endpoint ready (signed notifications: {'yes' if config.secret else 'no'}, "
            f"max body: {config.max_content_size} bytes)"
        )
        yield
        logger.info("Callback endpoint stopped")

    app = FastAPI(
        title="PubSubHubBub subscriber",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # ============================================================
    # Error Handling
    # ============================================================

    @app.exception_handler(HubRequestError)
    async def hub_request_error_handler(request: Request, exc: HubRequestError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.status_code} {exc.detail}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, _STATUS_MESSAGES.get(exc.status_code, "Error"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return _error_response(500, "Internal Server Error")

    # ============================================================
    # Handlers
    # ============================================================

    def on_verification(request: Request) -> Response:
        result = classify_verification(request.query_params)
        intent = result.intent
        logger.info(f"Hub verification: mode={intent.mode} topic={intent.topic}")
        return PlainTextResponse(
            result.response_body,
            status_code=200,
            background=BackgroundTask(events.emit, EventKind(intent.mode), intent),
        )

    async def on_notification(request: Request) -> Response:
        target = classify_notification(
            request.query_params,
            request.headers.getlist("link"),
            request.headers.get("x-hub-signature"),
            secret=config.secret,
            derive_secret=config.derive_topic_secret,
        )

        collector = NotificationBodyCollector(config.max_content_size, target.digest)
        try:
            await collector.drain(request.stream())
        except ClientDisconnect:
            raise BadRequest(f"Client disconnected after {collector.length} bytes")

        if collector.oversized:
            raise PayloadTooLarge(f"Body exceeds {config.max_content_size} bytes")

        if not collector.verify(target.signature):
            # Hubs retry on anything but 2xx, so a forged payload is acknowledged and dropped.
            logger.warning(f"Dropping notification for {target.topic}: {target.algorithm} signature mismatch")
            return Response(status_code=202, media_type="text/plain; charset=utf-8")

        event = NotificationEvent(
            topic=target.topic,
            hub=target.hub,
            callback_url=_callback_url(request),
            body=collector.text(),
            headers={k: ", ".join(request.headers.getlist(k)) for k in request.headers.keys()},
        )
        logger.debug(f"Notification for {target.topic} ({collector.length} bytes)")
        return Response(
            status_code=204,
            background=BackgroundTask(events.emit, EventKind.FEED, event),
        )

    @app.api_route("/{path:path}", methods=_ROUTED_METHODS, include_in_schema=False)
    async def callback(request: Request):
        if request.method == "GET":
            return on_verification(request)
        if request.method == "POST":
            return await on_notification(request)
        raise MethodNotAllowed(f"{request.method} is not supported")

    return app
