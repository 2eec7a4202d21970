"""
Test configuration and fixtures for the URL shortener.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from kvshortener.config import Settings
from kvshortener.storage import InMemoryKeyValueStore, SQLiteKeyValueStore


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file per test"""
    return Settings(
        store_backend="sqlite",
        store_path=str(tmp_path / "test.db"),
        base_url="http://testserver",
        queue_block_time=20,
        log_level="DEBUG",
    )


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture(params=["sqlite", "memory"])
def any_store(request, tmp_path):
    """Run the test once per key-value backend"""
    if request.param == "sqlite":
        store = SQLiteKeyValueStore(db_path=str(tmp_path / "kv.db"))
    else:
        store = InMemoryKeyValueStore()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def client(test_settings):
    """
    Create a test client running the full application lifespan
    (store opened, hit worker running).
    """
    app = create_app(test_settings)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
