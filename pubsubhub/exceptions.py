"""Exception hierarchy for the callback endpoint and the hub client."""

from __future__ import annotations

from typing import Any, Optional


class PubSubHubError(Exception):
    """Base exception for all pubsubhub errors."""


# ---------------------------------------------------------------------------
# Inbound (callback endpoint)
# ---------------------------------------------------------------------------


class HubRequestError(PubSubHubError):
    """An inbound hub request was rejected. Rendered as an HTML error page."""

    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.message
        super().__init__(f"{self.status_code} {self.message}: {self.detail}")


class BadRequest(HubRequestError):
    """Required protocol fields are missing or malformed."""

    status_code = 400
    message = "Bad Request"


class Forbidden(HubRequestError):
    """Unknown hub mode, missing signature header or unusable signature."""

    status_code = 403
    message = "Forbidden"


class UnsupportedAlgorithmError(Forbidden):
    """The signature header names a digest algorithm we do not accept."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Unsupported signature algorithm '{algorithm}'")


class MethodNotAllowed(HubRequestError):
    status_code = 405
    message = "Method Not Allowed"


class PayloadTooLarge(HubRequestError):
    status_code = 413
    message = "Request Entity Too Large"


# ---------------------------------------------------------------------------
# Outbound (hub client)
# ---------------------------------------------------------------------------


class SubscriptionError(PubSubHubError):
    """A subscription request to the hub did not succeed."""


class HubTransportError(SubscriptionError):
    """Raised when the hub could not be reached at the network layer."""


class UnexpectedHubStatus(SubscriptionError):
    """The hub answered with something other than 202 or 204."""

    def __init__(self, status_code: int, response_body: str = ""):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(f"Invalid response status {status_code}")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


class ListenError(PubSubHubError):
    """The callback server could not bind its listening socket."""

    def __init__(self, port: int, code: Any):
        self.port = port
        self.code = code
        super().__init__(f"Failed to listen on port {port} ({code})")
