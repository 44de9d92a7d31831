from __future__ import annotations

import logging
import os
from typing import Any
from urllib.parse import quote

import httpx
from packages.chores.entities import Entity, EntityKind
from packages.chores.field_map import from_remote_shape, insert_shape, to_remote_shape
from packages.chores.remote_base import ProfileRecord, RemoteError, RemoteNotFoundError
from packages.shared.schemas.rows import ProfileRowV1
from pydantic import ValidationError as SchemaValidationError

_LOGGER = logging.getLogger(__name__)


def default_api_url() -> str:
    return os.getenv("CHORES_API_URL", "http://127.0.0.1:8000").strip()


class HttpRemoteAdapter:
    """Adapter for the household chores API.

    Any httpx.Client works, including FastAPI's TestClient bound to the app in-process.
    """

    name = "HTTP"

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_env(cls) -> HttpRemoteAdapter:
        timeout = float(os.getenv("CHORES_API_TIMEOUT_SECONDS", "10"))
        return cls(httpx.Client(base_url=default_api_url(), timeout=timeout))

    def insert(self, kind: EntityKind, record: Entity) -> Entity:
        action = f"insert {kind.value}"
        response = self._request(
            action, "POST", f"/v1/{kind.value}", json=insert_shape(kind, record)
        )
        return self._entity(action, kind, self._json(action, response))

    def update(self, kind: EntityKind, entity_id: int, fields: dict[str, Any]) -> None:
        self._request(
            f"update {kind.value}",
            "PATCH",
            f"/v1/{kind.value}/{entity_id}",
            json=to_remote_shape(kind, fields),
        )

    def delete(self, kind: EntityKind, entity_id: int) -> None:
        self._request(f"delete {kind.value}", "DELETE", f"/v1/{kind.value}/{entity_id}")

    def list_by_household(self, kind: EntityKind, household_code: str) -> list[Entity]:
        action = f"list {kind.value}"
        response = self._request(
            action, "GET", f"/v1/{kind.value}", params={"household_id": household_code}
        )
        return [self._entity(action, kind, row) for row in self._json(action, response)]

    def household_exists(self, household_code: str) -> bool:
        try:
            path = f"/v1/households/{quote(household_code, safe='')}"
            self._request("get households", "GET", path)
        except RemoteNotFoundError:
            return False
        return True

    def insert_household(self, household_code: str) -> None:
        self._request("insert households", "POST", "/v1/households", json={"id": household_code})

    def insert_profile(self, name: str, household_code: str) -> ProfileRecord:
        action = "insert profiles"
        response = self._request(
            action, "POST", "/v1/profiles", json={"name": name, "household_id": household_code}
        )
        try:
            row = ProfileRowV1.model_validate(self._json(action, response))
        except SchemaValidationError as e:
            raise RemoteError(action, f"malformed row: {e}") from e
        return ProfileRecord(id=row.id, name=row.name, household_code=row.household_id)

    def _request(self, action: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            _LOGGER.warning("%s %s transport failure: %s", method, path, e)
            raise RemoteError(action, str(e) or type(e).__name__) from e

        if response.status_code == 404:
            raise RemoteNotFoundError(action, _detail(response))

        if response.status_code >= 400:
            raise RemoteError(action, _detail(response), status_code=response.status_code)

        return response

    @staticmethod
    def _json(action: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(action, "malformed response") from e

    @staticmethod
    def _entity(action: str, kind: EntityKind, row: Any) -> Entity:
        try:
            return from_remote_shape(kind, row)
        except SchemaValidationError as e:
            raise RemoteError(action, f"malformed row: {e}") from e


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
