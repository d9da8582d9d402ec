"""pubsubhub — PubSubHubBub (WebSub) subscriber: callback endpoint and hub client."""

from pubsubhub.client import HubClient, build_callback_url, build_subscription_form
from pubsubhub.config import HubAuth, HubServerConfig
from pubsubhub.endpoint import create_app
from pubsubhub.events import (
    ErrorEvent,
    EventEmitter,
    EventKind,
    ListeningEvent,
    NotificationEvent,
    SubscriptionFailure,
    SubscriptionIntent,
)
from pubsubhub.exceptions import (
    BadRequest,
    Forbidden,
    HubRequestError,
    HubTransportError,
    ListenError,
    MethodNotAllowed,
    PayloadTooLarge,
    PubSubHubError,
    SubscriptionError,
    UnexpectedHubStatus,
    UnsupportedAlgorithmError,
)
from pubsubhub.server import PubSubHubBubServer

__all__ = [
    "PubSubHubBubServer",
    "HubClient",
    "HubServerConfig",
    "HubAuth",
    "create_app",
    "build_callback_url",
    "build_subscription_form",
    "EventEmitter",
    "EventKind",
    "ListeningEvent",
    "ErrorEvent",
    "SubscriptionIntent",
    "SubscriptionFailure",
    "NotificationEvent",
    "PubSubHubError",
    "HubRequestError",
    "BadRequest",
    "Forbidden",
    "UnsupportedAlgorithmError",
    "MethodNotAllowed",
    "PayloadTooLarge",
    "SubscriptionError",
    "HubTransportError",
    "UnexpectedHubStatus",
    "ListenError",
]

__version__ = "0.1.0"
