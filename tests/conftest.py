import pytest
from fastapi.testclient import TestClient

from ephemeral_clip.adapters.memory_store.stores import MemoryBlobStore
from ephemeral_clip.core.config import Settings
from ephemeral_clip.main import create_app


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemoryBlobStore(clock=clock)


@pytest.fixture
def test_settings():
    return Settings(STORE_BACKEND="memory", MODE="dev", TRACING_ENABLED=False)


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def clocked_client(app, memory_store):
    """API client whose store runs on the FakeClock."""
    from ephemeral_clip.dependencies import get_blob_store

    app.dependency_overrides[get_blob_store] = lambda: memory_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides = {}
