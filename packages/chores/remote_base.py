from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from packages.chores.entities import Entity, EntityKind


class RemoteError(Exception):
    """Any failure reported by a remote persistence adapter."""

    def __init__(self, action: str, detail: str, status_code: int | None = None) -> None:
        super().__init__(f"{action} failed: {detail}")
        self.action = action
        self.detail = detail
        self.status_code = status_code


class RemoteNotFoundError(RemoteError):
    def __init__(self, action: str, detail: str = "not found") -> None:
        super().__init__(action, detail, status_code=404)


@dataclass(frozen=True, slots=True)
class ProfileRecord:
    id: str
    name: str
    household_code: str


class RemoteAdapter(Protocol):
    """Create/read/update/delete against the hosted collections.

    Records go in and come out with entity field names. Nothing is retried here; a failure
    raises RemoteError and the caller decides what to do.
    """

    name: str

    def insert(self, kind: EntityKind, record: Entity) -> Entity: ...

    def update(self, kind: EntityKind, entity_id: int, fields: dict[str, Any]) -> None: ...

    def delete(self, kind: EntityKind, entity_id: int) -> None: ...

    def list_by_household(self, kind: EntityKind, household_code: str) -> list[Entity]: ...

    def household_exists(self, household_code: str) -> bool: ...

    def insert_household(self, household_code: str) -> None: ...

    def insert_profile(self, name: str, household_code: str) -> ProfileRecord: ...
