"""In-memory entities for one household.

Entities are frozen; every change produces a new instance with dataclasses.replace, so a
store snapshot is just a copy of three lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityKind(str, Enum):
    ASSIGNEE = "assignees"
    CATEGORY = "categories"
    CHORE = "chores"


@dataclass(frozen=True, slots=True)
class Assignee:
    id: int
    name: str
    household_code: str


@dataclass(frozen=True, slots=True)
class Category:
    id: int
    name: str
    household_code: str
    default_assignee_ids: tuple[int, ...] = ()

    # Accordion state. Never persisted.
    is_open: bool = True


@dataclass(frozen=True, slots=True)
class Chore:
    id: int
    title: str
    household_code: str
    completed: bool = False

    # Empty means inherit the category's default assignees.
    direct_assignee_ids: tuple[int, ...] = ()
    category_id: int | None = None


Entity = Assignee | Category | Chore


def toggle_id(ids: tuple[int, ...], target: int) -> tuple[int, ...]:
    if target in ids:
        return tuple(i for i in ids if i != target)
    return (*ids, target)


def without_id(ids: tuple[int, ...], target: int) -> tuple[int, ...]:
    return tuple(i for i in ids if i != target)
