import pytest

from growseed.services.backend_client import BackendClient
from growseed.services.event_store_client import EventStoreClient
from growseed.services.state_store import InMemoryStateStore
from growseed.services.sync_orchestrator import SyncOrchestrator

BACKEND_URL = "http://backend.test"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def backend():
    return BackendClient(base_url=BACKEND_URL, timeout=5)


@pytest.fixture
def orchestrator(store, backend, clock):
    return SyncOrchestrator(store, backend, clock=clock)


@pytest.fixture
def event_store(backend):
    return EventStoreClient(backend, topic="BUD_E_LEADERBOARD")
