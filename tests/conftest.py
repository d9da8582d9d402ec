import pytest
from fastapi.testclient import TestClient

from pubsubhub.config import HubServerConfig
from pubsubhub.endpoint import create_app
from pubsubhub.events import EventEmitter, EventKind


class EventRecorder:
    """Collects every emitted event as ``(kind, payload)``."""

    def __init__(self, events: EventEmitter) -> None:
        self.received = []
        for kind in EventKind:
            events.on(kind, self._recorder(kind))

    def _recorder(self, kind):
        def record(payload):
            self.received.append((kind, payload))
        return record

    def of(self, kind):
        return [payload for k, payload in self.received if k == kind]


@pytest.fixture
def events():
    return EventEmitter()


@pytest.fixture
def recorder(events):
    return EventRecorder(events)


@pytest.fixture
def make_client(events):
    """Build a TestClient for a callback endpoint with the given config."""

    def _make(**config_kwargs) -> TestClient:
        config = HubServerConfig(callback_url="http://testserver/cb", **config_kwargs)
        return TestClient(create_app(config, events))

    return _make
