from __future__ import annotations

from copy import deepcopy
from itertools import count
from typing import Any
from uuid import uuid4

from packages.chores.entities import Entity, EntityKind
from packages.chores.field_map import from_remote_shape, insert_shape, to_remote_shape
from packages.chores.remote_base import ProfileRecord, RemoteError, RemoteNotFoundError


class MemoryRemoteAdapter:
    """Process-local stand-in for the hosted store.

    Rows are kept in the remote shape and checked the way the database checks them: rows need
    an existing household, a chore's category must exist, and a category referenced by chores
    cannot be deleted.
    """

    name = "MEMORY"

    def __init__(self) -> None:
        self._households: set[str] = set()
        self._profiles: dict[str, dict[str, Any]] = {}
        self._rows: dict[EntityKind, dict[int, dict[str, Any]]] = {k: {} for k in EntityKind}
        self._ids = count(1)

    def insert(self, kind: EntityKind, record: Entity) -> Entity:
        action = f"insert {kind.value}"
        row = insert_shape(kind, record)
        self._check_household(action, row["household_id"])
        if kind is EntityKind.CHORE:
            self._check_category(action, row["household_id"], row.get("category_id"))

        row["id"] = next(self._ids)
        self._rows[kind][row["id"]] = row
        return from_remote_shape(kind, deepcopy(row))

    def update(self, kind: EntityKind, entity_id: int, fields: dict[str, Any]) -> None:
        action = f"update {kind.value}"
        row = self._rows[kind].get(entity_id)
        if row is None:
            raise RemoteNotFoundError(action)

        changes = to_remote_shape(kind, fields)
        if kind is EntityKind.CHORE and "category_id" in changes:
            self._check_category(action, row["household_id"], changes["category_id"])

        row.update(deepcopy(changes))

    def delete(self, kind: EntityKind, entity_id: int) -> None:
        action = f"delete {kind.value}"
        if entity_id not in self._rows[kind]:
            raise RemoteNotFoundError(action)

        if kind is EntityKind.CATEGORY:
            for chore in self._rows[EntityKind.CHORE].values():
                if chore.get("category_id") == entity_id:
                    raise RemoteError(action, "category still has chores", status_code=409)

        del self._rows[kind][entity_id]

    def list_by_household(self, kind: EntityKind, household_code: str) -> list[Entity]:
        rows = [r for r in self._rows[kind].values() if r["household_id"] == household_code]
        rows.sort(key=lambda r: r["id"])
        return [from_remote_shape(kind, deepcopy(r)) for r in rows]

    def household_exists(self, household_code: str) -> bool:
        return household_code in self._households

    def insert_household(self, household_code: str) -> None:
        if household_code in self._households:
            raise RemoteError("insert households", "household already exists", status_code=409)
        self._households.add(household_code)

    def insert_profile(self, name: str, household_code: str) -> ProfileRecord:
        self._check_household("insert profiles", household_code)
        profile_id = uuid4().hex
        self._profiles[profile_id] = {
            "id": profile_id,
            "name": name,
            "household_id": household_code,
        }
        return ProfileRecord(id=profile_id, name=name, household_code=household_code)

    def profile_count(self, household_code: str) -> int:
        return sum(1 for p in self._profiles.values() if p["household_id"] == household_code)

    def _check_household(self, action: str, household_code: str) -> None:
        if household_code not in self._households:
            raise RemoteError(action, f"unknown household {household_code}", status_code=409)

    def _check_category(self, action: str, household_code: str, category_id: int | None) -> None:
        if category_id is None:
            return
        category = self._rows[EntityKind.CATEGORY].get(category_id)
        if category is None or category["household_id"] != household_code:
            raise RemoteError(action, f"unknown category {category_id}", status_code=409)
