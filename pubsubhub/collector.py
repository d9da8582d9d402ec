"""Streaming collection of notification bodies with a size ceiling."""

from __future__ import annotations

import logging
from typing import AsyncIterable, List, Optional

from pubsubhub.signature import StreamingDigest

logger = logging.getLogger(__name__)


class NotificationBodyCollector:
    """Accumulate a POST body chunk by chunk.

    Once the next chunk would push the body past ``max_content_size`` the
    collector flags the request as oversized and switches to discarding:
    later chunks are neither buffered nor digested, but the stream is still
    drained so the hub sees a complete exchange.
    """

    def __init__(self, max_content_size: int, digest: Optional[StreamingDigest] = None) -> None:
        self.max_content_size = max_content_size
        self.digest = digest
        self.length = 0
        self.oversized = False
        self.finished = False
        self._chunks: List[bytes] = []

    def feed(self, chunk: Optional[bytes]) -> bool:
        """Offer one chunk. Returns True if it was buffered."""
        if not chunk or self.oversized:
            return False

        if self.length + len(chunk) > self.max_content_size:
            self.oversized = True
            self._chunks.clear()
            logger.warning(
                f"Notification body exceeds {self.max_content_size} bytes, discarding remainder"
            )
            return False

        self._chunks.append(chunk)
        self.length += len(chunk)
        if self.digest is not None:
            self.digest.update(chunk)
        return True

    async def drain(self, stream: AsyncIterable[bytes]) -> "NotificationBodyCollector":
        """Consume *stream* to the end, feeding every chunk."""
        async for chunk in stream:
            self.feed(chunk)
        self.finished = True
        return self

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def verify(self, expected_signature: Optional[str]) -> bool:
        """True when no digest is required or the digest matches."""
        if self.digest is None:
            return True
        return self.digest.matches(expected_signature or "")
