"""
Run a subscriber from the environment.

    PUBSUB_CALLBACK_URL=https://me.example/cb PUBSUB_SECRET=s3cret python -m pubsubhub

Settings are read from ``PUBSUB_*`` variables, with a ``.env`` file in the
working directory loaded first.
"""
import asyncio
import logging
import os

from dotenv import load_dotenv

from pubsubhub._base import DEFAULT_HOST, DEFAULT_PORT
from pubsubhub.config import HubServerConfig
from pubsubhub.events import EventKind, NotificationEvent
from pubsubhub.server import PubSubHubBubServer

logger = logging.getLogger("pubsubhub")


def _log_event(kind: EventKind):
    def handler(payload):
        if isinstance(payload, NotificationEvent):
            logger.info(f"{kind.value}: {payload.topic} ({len(payload.body)} chars)")
        else:
            logger.info(f"{kind.value}: {payload}")
    return handler


async def main() -> None:
    server = PubSubHubBubServer(HubServerConfig.from_env())
    for kind in EventKind:
        server.on(kind, _log_event(kind))
    try:
        await server.listen(
            port=int(os.environ.get("PUBSUB_PORT", DEFAULT_PORT)),
            host=os.environ.get("PUBSUB_HOST", DEFAULT_HOST),
            log_level=os.environ.get("LOG_LEVEL", "info").lower(),
        )
    finally:
        await server.close()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(main())
