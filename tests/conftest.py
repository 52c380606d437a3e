# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from cartbill.database import MemoryDocumentStore, get_store
from cartbill.main import app


@pytest.fixture
def store():
    s = MemoryDocumentStore()
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.clear()


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def seed(client):
    def _seed(item_code, description="", unit="", price=0):
        r = client.post("/products", json={"itemCode": item_code, "description": description, "unit": unit, "price": price})
        assert r.status_code == 201
        return r.json()
    return _seed
