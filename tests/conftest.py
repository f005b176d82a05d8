import os
import tempfile

# Configure the service before anything imports it
os.environ.setdefault("LOCAL_PATH", tempfile.mkdtemp(prefix="objectstore-tests-"))
os.environ["AUTH_TOKEN"] = "test-token"
os.environ["STATS_BACKEND"] = "memory"
os.environ["BASE_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient

from src.objectstore.deps import get_orchestrator
from src.objectstore.ingest import IngestOrchestrator, SizeGuard
from src.objectstore.main import app
from src.objectstore.stats import InMemoryStatsCounter, get_stats_counter
from src.objectstore.storage import LocalStore, get_store
from tests.helpers import make_image_bytes

MAX_TEST_FILE_SIZE = 1 << 20


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(base_path=str(tmp_path / "uploads"), base_url="http://testserver")


@pytest.fixture
def stats() -> InMemoryStatsCounter:
    return InMemoryStatsCounter()


@pytest.fixture
def orchestrator(store, stats) -> IngestOrchestrator:
    return IngestOrchestrator(
        store=store,
        size_guard=SizeGuard(MAX_TEST_FILE_SIZE),
        stats=stats,
        quality=80,
    )


@pytest.fixture
def client(store, stats, orchestrator):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_stats_counter] = lambda: stats
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token"}


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")
