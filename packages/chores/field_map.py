"""Translation between in-memory entity fields and remote row columns.

This is the only module that knows both spellings. Adapters call it at their boundary; every
other module sees entity field names only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from packages.chores.entities import Assignee, Category, Chore, Entity, EntityKind
from packages.shared.schemas.rows import AssigneeRowV1, CategoryRowV1, ChoreRowV1

# entity field -> remote column
_FIELD_MAPS: dict[EntityKind, dict[str, str]] = {
    EntityKind.ASSIGNEE: {
        "id": "id",
        "name": "name",
        "household_code": "household_id",
    },
    EntityKind.CATEGORY: {
        "id": "id",
        "name": "name",
        "household_code": "household_id",
        "default_assignee_ids": "assignee_ids",
    },
    EntityKind.CHORE: {
        "id": "id",
        "title": "title",
        "completed": "completed",
        "household_code": "household_id",
        "direct_assignee_ids": "assignee_ids",
        "category_id": "category_id",
    },
}

# Fields that exist only on the client.
_LOCAL_ONLY: dict[EntityKind, frozenset[str]] = {
    EntityKind.ASSIGNEE: frozenset(),
    EntityKind.CATEGORY: frozenset({"is_open"}),
    EntityKind.CHORE: frozenset(),
}

_LIST_COLUMNS = frozenset({"assignee_ids"})


def to_remote_shape(kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a full or partial set of entity fields into remote columns."""

    mapping = _FIELD_MAPS[kind]
    out: dict[str, Any] = {}
    for name, value in fields.items():
        if name in _LOCAL_ONLY[kind]:
            continue
        if name not in mapping:
            raise ValueError(f"Unknown {kind.value} field: {name!r}")
        column = mapping[name]
        out[column] = list(value) if column in _LIST_COLUMNS else value
    return out


def from_remote_shape(kind: EntityKind, row: Mapping[str, Any]) -> Entity:
    """Validate a remote row and build the matching entity."""

    if kind is EntityKind.ASSIGNEE:
        a = AssigneeRowV1.model_validate(row)
        return Assignee(id=a.id, name=a.name, household_code=a.household_id)

    if kind is EntityKind.CATEGORY:
        c = CategoryRowV1.model_validate(row)
        return Category(
            id=c.id,
            name=c.name,
            household_code=c.household_id,
            default_assignee_ids=tuple(dict.fromkeys(c.assignee_ids)),
        )

    if kind is EntityKind.CHORE:
        ch = ChoreRowV1.model_validate(row)
        return Chore(
            id=ch.id,
            title=ch.title,
            household_code=ch.household_id,
            completed=ch.completed,
            direct_assignee_ids=tuple(dict.fromkeys(ch.assignee_ids)),
            category_id=ch.category_id,
        )

    raise ValueError(f"Unknown entity kind: {kind!r}")


def insert_shape(kind: EntityKind, record: Entity) -> dict[str, Any]:
    """Remote columns for inserting a record. The id is always server-assigned."""

    fields = asdict(record)
    fields.pop("id", None)
    return to_remote_shape(kind, fields)
