"""Turn inbound hub callbacks into verification intents or notification targets."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple

from pubsubhub.events import SubscriptionIntent
from pubsubhub.exceptions import BadRequest, Forbidden
from pubsubhub.signature import StreamingDigest, parse_signature_header, sign_payload

HUB_MODES = frozenset({"denied", "subscribe", "unsubscribe"})

_LINK_RE = re.compile(r"""<([^>]+)>\s*(?:;\s*rel\s*=\s*['"]([^'"]+)['"])?""", re.IGNORECASE)


@dataclass
class VerificationResult:
    """What to answer a GET callback with and what to emit afterwards."""

    intent: SubscriptionIntent
    response_body: str


@dataclass
class NotificationTarget:
    """Resolved routing and signature expectations for a POST callback."""

    topic: str
    hub: Optional[str] = None
    algorithm: Optional[str] = None
    signature: Optional[str] = None
    digest: Optional[StreamingDigest] = None


def classify_verification(query: Mapping[str, str]) -> VerificationResult:
    """Handle ``hub.mode`` / ``hub.topic`` / ``hub.challenge`` query fields.

    Raises :class:`BadRequest` when the topic or mode is missing (or the
    lease is not an integer) and :class:`Forbidden` for unknown modes.
    """
    topic = query.get("hub.topic")
    mode = query.get("hub.mode")
    if not topic or not mode:
        raise BadRequest("hub.topic and hub.mode are required")
    if mode not in HUB_MODES:
        raise Forbidden(f"Unknown hub.mode '{mode}'")

    challenge = query.get("hub.challenge")
    hub = query.get("hub")

    if mode == "denied":
        intent = SubscriptionIntent(mode=mode, topic=topic, hub=hub, challenge=challenge)
        return VerificationResult(intent=intent, response_body=challenge or "ok")

    try:
        lease_seconds = int(query.get("hub.lease_seconds") or 0)
    except ValueError:
        raise BadRequest("hub.lease_seconds must be an integer")

    intent = SubscriptionIntent(
        mode=mode,
        topic=topic,
        hub=hub,
        challenge=challenge,
        lease_expiry=lease_seconds + round(time.time()),
    )
    return VerificationResult(intent=intent, response_body=challenge or "")


def parse_link_headers(values: Iterable[str]) -> Tuple[Optional[str], Optional[str]]:
    """Extract ``(topic, hub)`` from ``rel="self"`` / ``rel="hub"`` links."""
    topic = hub = None
    for value in values:
        for match in _LINK_RE.finditer(value or ""):
            url, rel = match.group(1).strip(), (match.group(2) or "").strip().lower()
            if rel == "self":
                topic = url
            elif rel == "hub":
                hub = url
    return topic, hub


def derive_topic_secret(secret: str, topic: str) -> str:
    """The per-topic secret handed to the hub as ``hub.secret``."""
    return sign_payload(topic.encode(), secret, "sha1")


def classify_notification(
    query: Mapping[str, str],
    link_headers: Iterable[str],
    signature_header: Optional[str],
    secret: Optional[str] = None,
    derive_secret: bool = False,
) -> NotificationTarget:
    """Resolve topic/hub for a content notification and prepare verification.

    Everything here runs before the body is read, so a request that cannot
    be authenticated is refused without consuming its payload.
    """
    topic = query.get("topic")
    hub = query.get("hub")

    link_topic, link_hub = parse_link_headers(link_headers)
    topic = link_topic or topic
    hub = link_hub or hub

    if not topic:
        raise BadRequest("No topic in query string or Link header")

    target = NotificationTarget(topic=topic, hub=hub)
    if not secret:
        return target

    if not signature_header:
        raise Forbidden("Missing X-Hub-Signature header")

    target.algorithm, target.signature = parse_signature_header(signature_header)
    key = derive_topic_secret(secret, topic) if derive_secret else secret
    # Raises UnsupportedAlgorithmError (a Forbidden) for unknown algorithms.
    target.digest = StreamingDigest(target.algorithm, key)
    return target
