"""Shared fixtures: the app wired to in-memory storage and a mock-mode explorer."""

import pytest
from fastapi.testclient import TestClient

from server.app import app
from server.dependencies import get_explorer_factory, get_kv_store
from stellarmind.engine import Explorer
from stellarmind.store.kv import MemoryStore


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def client(kv):
    app.dependency_overrides[get_kv_store] = lambda: kv
    app.dependency_overrides[get_explorer_factory] = lambda: (lambda model_id: Explorer(None))
    yield TestClient(app)
    app.dependency_overrides.clear()
