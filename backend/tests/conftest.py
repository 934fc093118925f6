import os
# Keep logs quiet and deterministic before any app imports.
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("DEPLOYMENT_ENV", "test")

import pytest
from fastapi.testclient import TestClient

from vidya_integrity.components.telemetry.models import TrackingSession
from vidya_integrity.components.telemetry.registry import tracker_registry
from vidya_integrity.main import app


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> int:
        self.now_ms += ms
        return self.now_ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return TrackingSession(clock=clock, paste_threshold=50, blur_clears_any_focus=False)


@pytest.fixture
def legacy_session(clock):
    return TrackingSession(clock=clock, paste_threshold=50, blur_clears_any_focus=True)


@pytest.fixture(scope="function")
def client():
    tracker_registry.clear()
    with TestClient(app) as c:
        yield c
    tracker_registry.clear()


# ---------------------------------------------------------------------------
# Helper: post a batch of events for an attempt
# ---------------------------------------------------------------------------

def post_events(client: TestClient, attempt_id: str, *events: dict):
    return client.post(
        f"/api/v1/integrity/attempts/{attempt_id}/events",
        json={"events": list(events)},
    )
