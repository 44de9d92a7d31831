from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "chores_chores.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("CHORES_DB_AUTO_CREATE", "true")

    from services.api.app.main import app

    with TestClient(app) as c:
        c.post("/v1/households", json={"id": "HOME-2026"})
        c.post("/v1/households", json={"id": "OTHER-1"})
        yield c


def test_create_chore_defaults(client: TestClient) -> None:
    response = client.post("/v1/chores", json={"title": "Wash dishes", "household_id": "HOME-2026"})
    assert response.status_code == 201

    data = response.json()
    assert data["title"] == "Wash dishes"
    assert data["completed"] is False
    assert data["assignee_ids"] == []
    assert data["category_id"] is None


def test_create_chore_validates_title(client: TestClient) -> None:
    response = client.post("/v1/chores", json={"title": "", "household_id": "HOME-2026"})
    assert response.status_code == 422


def test_create_chore_rejects_unknown_category(client: TestClient) -> None:
    response = client.post(
        "/v1/chores", json={"title": "Mop", "household_id": "HOME-2026", "category_id": 42}
    )
    assert response.status_code == 409


def test_create_chore_rejects_category_of_other_household(client: TestClient) -> None:
    other = client.post(
        "/v1/categories", json={"name": "Garage", "household_id": "OTHER-1"}
    ).json()

    response = client.post(
        "/v1/chores",
        json={"title": "Sweep", "household_id": "HOME-2026", "category_id": other["id"]},
    )
    assert response.status_code == 409


def test_patch_only_touches_sent_fields(client: TestClient) -> None:
    kitchen = client.post(
        "/v1/categories", json={"name": "Kitchen", "household_id": "HOME-2026"}
    ).json()
    chore = client.post(
        "/v1/chores",
        json={
            "title": "Mop floor",
            "household_id": "HOME-2026",
            "category_id": kitchen["id"],
            "assignee_ids": [1, 2],
        },
    ).json()

    toggled = client.patch(f"/v1/chores/{chore['id']}", json={"completed": True}).json()
    assert toggled["completed"] is True
    assert toggled["assignee_ids"] == [1, 2]
    assert toggled["category_id"] == kitchen["id"]

    moved = client.patch(f"/v1/chores/{chore['id']}", json={"category_id": None}).json()
    assert moved["category_id"] is None
    assert moved["completed"] is True

    retitled = client.patch(f"/v1/chores/{chore['id']}", json={"title": "Mop hallway"}).json()
    assert retitled["title"] == "Mop hallway"


def test_patch_rejects_unknown_category(client: TestClient) -> None:
    chore = client.post("/v1/chores", json={"title": "Dust", "household_id": "HOME-2026"}).json()

    response = client.patch(f"/v1/chores/{chore['id']}", json={"category_id": 999})
    assert response.status_code == 409


def test_delete_chore(client: TestClient) -> None:
    chore = client.post("/v1/chores", json={"title": "Dust", "household_id": "HOME-2026"}).json()

    assert client.delete(f"/v1/chores/{chore['id']}").status_code == 204
    assert client.delete(f"/v1/chores/{chore['id']}").status_code == 404
    assert client.get("/v1/chores", params={"household_id": "HOME-2026"}).json() == []
