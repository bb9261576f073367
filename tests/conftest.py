import pytest
from fastapi.testclient import TestClient

from inventory_studio.main import app
from inventory_studio.settings import settings

ALICE = {"X-User-Email": "alice@example.com", "X-User-Name": "Alice"}
BOB = {"X-User-Email": "bob@example.com"}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_URL", f"sqlite+aiosqlite:///{(tmp_path / 'studio.db').as_posix()}")
    monkeypatch.setattr(settings, "DATA_ROOT", tmp_path)
    monkeypatch.setattr(settings, "DB_CREATE_ALL", True)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def inventory(client):
    response = client.post(
        "/inventories",
        json={"title": "Lab equipment", "category": "EQUIPMENT", "tags": ["lab", "lab", " tools "]},
        headers=ALICE,
    )
    assert response.status_code == 201
    return response.json()
