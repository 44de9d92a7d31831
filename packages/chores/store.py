from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from packages.chores.entities import Assignee, Category, Chore, Entity, EntityKind
from packages.chores.remote_base import RemoteAdapter

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    assignees: tuple[Assignee, ...]
    categories: tuple[Category, ...]
    chores: tuple[Chore, ...]


class EntityStore:
    """The active household's assignees, categories and chores.

    Collections are only ever swapped whole. Nothing here validates; callers keep the
    collections consistent before replacing them.
    """

    def __init__(self) -> None:
        self.assignees: list[Assignee] = []
        self.categories: list[Category] = []
        self.chores: list[Chore] = []

    def load(
        self,
        adapter: RemoteAdapter,
        household_code: str,
        display_name: str | None = None,
    ) -> tuple[list[Assignee], list[Category], list[Chore]]:
        """Rebuild all three collections from the remote store.

        When display_name matches no assignee (case-insensitively) an assignee is created for
        it. Raises RemoteError if any call fails, leaving the store untouched.
        """

        assignees = adapter.list_by_household(EntityKind.ASSIGNEE, household_code)
        categories = adapter.list_by_household(EntityKind.CATEGORY, household_code)
        chores = adapter.list_by_household(EntityKind.CHORE, household_code)

        name = (display_name or "").strip()
        if name and not any(a.name.lower() == name.lower() for a in assignees):
            created = adapter.insert(
                EntityKind.ASSIGNEE, Assignee(id=0, name=name, household_code=household_code)
            )
            _LOGGER.info("Created assignee %r for %s on first load", name, household_code)
            assignees = [*assignees, created]

        # Keep accordion state for categories that survived the reload.
        open_state = {c.id: c.is_open for c in self.categories}
        categories = [replace(c, is_open=open_state.get(c.id, c.is_open)) for c in categories]

        self.assignees = list(assignees)
        self.categories = list(categories)
        self.chores = list(chores)
        _LOGGER.debug(
            "Loaded %s: %d assignees, %d categories, %d chores",
            household_code,
            len(self.assignees),
            len(self.categories),
            len(self.chores),
        )
        return self.assignees, self.categories, self.chores

    def replace_collection(self, kind: EntityKind, items: Sequence[Entity]) -> None:
        if kind is EntityKind.ASSIGNEE:
            self.assignees = list(items)
        elif kind is EntityKind.CATEGORY:
            self.categories = list(items)
        elif kind is EntityKind.CHORE:
            self.chores = list(items)
        else:
            raise ValueError(f"Unknown entity kind: {kind!r}")

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(tuple(self.assignees), tuple(self.categories), tuple(self.chores))

    def restore(self, snapshot: StoreSnapshot) -> None:
        self.assignees = list(snapshot.assignees)
        self.categories = list(snapshot.categories)
        self.chores = list(snapshot.chores)

    def clear(self) -> None:
        self.assignees, self.categories, self.chores = [], [], []

    def get_assignee(self, assignee_id: int) -> Assignee | None:
        return next((a for a in self.assignees if a.id == assignee_id), None)

    def get_category(self, category_id: int) -> Category | None:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_chore(self, chore_id: int) -> Chore | None:
        return next((c for c in self.chores if c.id == chore_id), None)
