"""HMAC signing and verification for hub payloads.

Digests are computed incrementally so a notification body can be verified
while it streams in, without holding a second copy of it.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Iterable, Optional, Tuple

from pubsubhub.exceptions import UnsupportedAlgorithmError

SUPPORTED_ALGORITHMS = frozenset({"sha1", "sha224", "sha256", "sha384", "sha512"})


class StreamingDigest:
    """Running keyed-hash context for one request body."""

    def __init__(self, algorithm: str, secret: str) -> None:
        algorithm = (algorithm or "").lower()
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise UnsupportedAlgorithmError(algorithm)
        self.algorithm = algorithm
        self._hmac = hmac.new(secret.encode(), digestmod=getattr(hashlib, algorithm))

    def update(self, chunk: bytes) -> None:
        self._hmac.update(chunk)

    def hexdigest(self) -> str:
        return self._hmac.hexdigest().lower()

    def matches(self, expected_hex: str) -> bool:
        return compare(expected_hex, self.hexdigest())


def digest(algorithm: str, secret: str, chunks: Iterable[bytes]) -> str:
    """Compute the lowercase hex HMAC of *chunks* keyed by *secret*."""
    ctx = StreamingDigest(algorithm, secret)
    for chunk in chunks:
        ctx.update(chunk)
    return ctx.hexdigest()


def compare(expected_hex: Optional[str], actual_hex: Optional[str]) -> bool:
    """Case-insensitive constant-time comparison of two hex digests."""
    if not expected_hex or not actual_hex:
        return False
    return hmac.compare_digest(
        expected_hex.strip().lower().encode(),
        actual_hex.strip().lower().encode(),
    )


def sign_payload(payload: bytes, secret: str, algorithm: str = "sha1") -> str:
    """Compute the hex HMAC digest for *payload* using *secret*."""
    return digest(algorithm, secret, [payload])


def parse_signature_header(value: str) -> Tuple[str, str]:
    """Split an ``X-Hub-Signature`` value into ``(algorithm, signature)``.

    A value without ``=`` yields an empty signature, which never matches.
    """
    parts = (value or "").split("=")
    algorithm = parts[0].strip().lower()
    signature = parts[-1].strip().lower() if len(parts) > 1 else ""
    return algorithm, signature
