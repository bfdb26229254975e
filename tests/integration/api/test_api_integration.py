"""
Integration tests for the FastAPI application.

Uses TestClient over the real app; only the store location is overridden.
"""

import pytest
from fastapi.testclient import TestClient

from inbox_triage.api.dependencies import get_store
from inbox_triage.main import app
from inbox_triage.persistence.store import MemoizedStore


@pytest.fixture
def client(tmp_path):
    store = MemoizedStore(tmp_path / "db.json").open()
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root_endpoint(client):
    """Test root endpoint returns service info."""
    response = client.get("/")
    
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "Inbox Triage"
    assert data["version"] == "0.1.0"
    assert data["docs"] == "/docs"
    assert data["entries"] == "/entries"


def test_empty_store_lists_nothing(client):
    response = client.get("/entries")
    
    assert response.status_code == 200
    assert response.json() == []


def test_openapi_lists_store_routes(client):
    paths = client.get("/openapi.json").json()["paths"]
    
    assert "/entries/{entry_id}" in paths
    assert "put" in paths["/entries/{entry_id}"]
    assert "/entries/{entry_id}/processed" in paths
