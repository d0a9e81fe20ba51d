import os

os.environ.setdefault("ENV_MODE", "development")

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.orders import MockOrderStore, get_order_store


@pytest.fixture()
def pasta():
    return {"dish": "Pasta", "price": 12.5, "server": "Alice", "table": "T1"}


@pytest.fixture()
def store():
    return MockOrderStore(timeout=1.0)


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_order_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def create_order(client):
    def _create(**fields):
        response = client.post("/order/create", json=fields)
        assert response.status_code == 200, response.text
        return response.json()["InsertedID"]

    return _create
