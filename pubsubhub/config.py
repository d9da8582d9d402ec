"""Subscriber configuration.

One :class:`HubServerConfig` belongs to one server instance; several servers
with different secrets can live in the same process.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pubsubhub._base import DEFAULT_MAX_CONTENT_SIZE

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class HubAuth(BaseModel):
    """Basic-auth credentials presented to the hub after a 401 challenge."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class HubServerConfig(BaseModel):
    """Immutable settings shared by the callback endpoint and the hub client."""

    model_config = ConfigDict(frozen=True)

    callback_url: str = ""
    secret: Optional[str] = None
    max_content_size: int = Field(default=DEFAULT_MAX_CONTENT_SIZE, gt=0)
    auth: Optional[HubAuth] = None
    # Verify notifications with HMAC-SHA1(topic) keyed by ``secret``, which is
    # the value sent to the hub as ``hub.secret``.
    derive_topic_secret: bool = False

    @field_validator("secret", mode="before")
    @classmethod
    def _empty_secret_is_none(cls, v):
        return v or None

    @field_validator("max_content_size", mode="before")
    @classmethod
    def _default_max_content_size(cls, v):
        return v or DEFAULT_MAX_CONTENT_SIZE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HubServerConfig":
        """Build a config from ``PUBSUB_*`` environment variables."""
        env = os.environ if environ is None else environ
        auth = None
        username = env.get("PUBSUB_AUTH_USERNAME")
        if username:
            auth = HubAuth(username=username, password=env.get("PUBSUB_AUTH_PASSWORD", ""))
        return cls(
            callback_url=env.get("PUBSUB_CALLBACK_URL", ""),
            secret=env.get("PUBSUB_SECRET"),
            max_content_size=int(env.get("PUBSUB_MAX_CONTENT_SIZE") or 0),
            auth=auth,
            derive_topic_secret=env.get("PUBSUB_DERIVE_TOPIC_SECRET", "").strip().lower() in _TRUTHY,
        )
