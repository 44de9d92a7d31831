from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "chores_assignees.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("CHORES_DB_AUTO_CREATE", "true")

    from services.api.app.main import app

    with TestClient(app) as c:
        c.post("/v1/households", json={"id": "HOME-2026"})
        c.post("/v1/households", json={"id": "OTHER-1"})
        yield c


def test_list_is_scoped_to_household_and_insertion_ordered(client: TestClient) -> None:
    for name, household in (("Alex", "HOME-2026"), ("Pat", "OTHER-1"), ("Sam", "HOME-2026")):
        response = client.post("/v1/assignees", json={"name": name, "household_id": household})
        assert response.status_code == 201

    rows = client.get("/v1/assignees", params={"household_id": "HOME-2026"}).json()
    assert [r["name"] for r in rows] == ["Alex", "Sam"]
    assert all(r["household_id"] == "HOME-2026" for r in rows)


def test_list_for_unknown_household_is_empty(client: TestClient) -> None:
    response = client.get("/v1/assignees", params={"household_id": "NOBODY"})
    assert response.status_code == 200
    assert response.json() == []


def test_store_accepts_duplicate_names(client: TestClient) -> None:
    client.post("/v1/assignees", json={"name": "Alex", "household_id": "HOME-2026"})
    response = client.post("/v1/assignees", json={"name": "alex", "household_id": "HOME-2026"})

    assert response.status_code == 201


def test_create_requires_known_household(client: TestClient) -> None:
    response = client.post("/v1/assignees", json={"name": "Alex", "household_id": "MISSING"})
    assert response.status_code == 409


def test_rename_and_delete(client: TestClient) -> None:
    created = client.post(
        "/v1/assignees", json={"name": "Alex", "household_id": "HOME-2026"}
    ).json()

    renamed = client.patch(f"/v1/assignees/{created['id']}", json={"name": "Alexis"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Alexis"

    deleted = client.delete(f"/v1/assignees/{created['id']}")
    assert deleted.status_code == 204
    assert client.get("/v1/assignees", params={"household_id": "HOME-2026"}).json() == []


def test_update_and_delete_missing_are_404(client: TestClient) -> None:
    assert client.patch("/v1/assignees/999", json={"name": "x"}).status_code == 404
    assert client.delete("/v1/assignees/999").status_code == 404
