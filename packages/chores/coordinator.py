"""Optimistic mutations for one household.

Every user action goes through MutationCoordinator._mutate: snapshot the store, apply the
change locally, make the remote call(s), and on RemoteError restore the snapshot and set a
banner message. Local validation failures raise ValidationError before anything changes.

Multi-step actions (deleting an assignee or a category) issue one remote call per affected
row and are not atomic. A failure partway leaves earlier remote steps in place; the
coordinator flags needs_repair and repair_references() brings the remote rows back to a
consistent state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from itertools import count
from typing import Any, TypeVar

from packages.chores.entities import (
    Assignee,
    Category,
    Chore,
    Entity,
    EntityKind,
    toggle_id,
    without_id,
)
from packages.chores.remote_base import RemoteAdapter, RemoteError, RemoteNotFoundError
from packages.chores.store import EntityStore

_LOGGER = logging.getLogger(__name__)

_E = TypeVar("_E", Assignee, Category, Chore)

_LABELS = {
    EntityKind.ASSIGNEE: "assignee",
    EntityKind.CATEGORY: "category",
    EntityKind.CHORE: "chore",
}


class ValidationError(Exception):
    """Input rejected locally, before any state change or remote call."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def failure_message(action: str) -> str:
    return f"Failed to {action}. Please try again."


def _required(value: str, field: str, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, f"{label} cannot be empty")
    return cleaned


class MutationCoordinator:
    def __init__(self, store: EntityStore, adapter: RemoteAdapter, household_code: str) -> None:
        self.store = store
        self.household_code = household_code
        self._adapter = adapter

        # Dismissible banner text for the last failed remote action.
        self.error: str | None = None
        self.needs_repair = False

        self._pending: set[str] = set()
        self._temp_ids = count(-1, -1)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def dismiss_error(self) -> None:
        self.error = None

    def refresh(self, display_name: str | None = None) -> bool:
        try:
            self.store.load(self._adapter, self.household_code, display_name)
        except RemoteError as e:
            _LOGGER.warning("Loading %s failed: %s", self.household_code, e)
            self.error = failure_message("load chores")
            return False
        return True

    # Chores

    def add_chore(self, title: str, category_id: int | None = None) -> Chore | None:
        title = _required(title, "title", "Chore title")
        if category_id is not None:
            self._require(EntityKind.CATEGORY, category_id)

        draft = Chore(
            id=next(self._temp_ids),
            title=title,
            household_code=self.household_code,
            category_id=category_id,
        )
        return self._create(EntityKind.CHORE, draft, action="add chore", key="chore:add")

    def toggle_chore(self, chore_id: int) -> bool:
        chore = self._require(EntityKind.CHORE, chore_id)
        return self._update(
            EntityKind.CHORE,
            replace(chore, completed=not chore.completed),
            {"completed": not chore.completed},
            action="update chore",
            key=f"chore:{chore_id}:completed",
        )

    def toggle_chore_assignee(self, chore_id: int, assignee_id: int) -> bool:
        chore = self._require(EntityKind.CHORE, chore_id)
        self._require(EntityKind.ASSIGNEE, assignee_id)

        ids = toggle_id(chore.direct_assignee_ids, assignee_id)
        return self._update(
            EntityKind.CHORE,
            replace(chore, direct_assignee_ids=ids),
            {"direct_assignee_ids": ids},
            action="assign chore",
            key=f"chore:{chore_id}:assignees",
        )

    def move_chore_to_category(self, chore_id: int, category_id: int | None) -> bool:
        chore = self._require(EntityKind.CHORE, chore_id)
        if category_id is not None:
            self._require(EntityKind.CATEGORY, category_id)

        return self._update(
            EntityKind.CHORE,
            replace(chore, category_id=category_id),
            {"category_id": category_id},
            action="move chore",
            key=f"chore:{chore_id}:category",
        )

    def rename_chore(self, chore_id: int, title: str) -> bool:
        chore = self._require(EntityKind.CHORE, chore_id)
        title = _required(title, "title", "Chore title")
        return self._update(
            EntityKind.CHORE,
            replace(chore, title=title),
            {"title": title},
            action="rename chore",
            key=f"chore:{chore_id}:title",
        )

    def delete_chore(self, chore_id: int) -> bool:
        self._require(EntityKind.CHORE, chore_id)

        def apply() -> None:
            self.store.replace_collection(
                EntityKind.CHORE, [c for c in self.store.chores if c.id != chore_id]
            )

        return self._mutate(
            action="delete chore",
            key=f"chore:{chore_id}:delete",
            apply=apply,
            remote=lambda: self._delete_remote(EntityKind.CHORE, chore_id),
        )

    # Assignees

    def add_assignee(self, name: str) -> Assignee | None:
        name = self._unique_assignee_name(name)
        draft = Assignee(id=next(self._temp_ids), name=name, household_code=self.household_code)
        return self._create(EntityKind.ASSIGNEE, draft, action="add assignee", key="assignee:add")

    def quick_add_assignee(self, chore_id: int, name: str) -> Assignee | None:
        """Create an assignee and assign it directly to a chore in one action."""

        chore = self._require(EntityKind.CHORE, chore_id)
        name = self._unique_assignee_name(name)
        draft = Assignee(id=next(self._temp_ids), name=name, household_code=self.household_code)
        created: list[Assignee] = []
        orphaned: list[Assignee] = []

        def apply() -> None:
            self.store.replace_collection(EntityKind.ASSIGNEE, [*self.store.assignees, draft])
            self._swap(
                EntityKind.CHORE,
                chore_id,
                replace(chore, direct_assignee_ids=(*chore.direct_assignee_ids, draft.id)),
            )

        def remote() -> Assignee:
            stored = self._adapter.insert(EntityKind.ASSIGNEE, draft)
            ids = (*chore.direct_assignee_ids, stored.id)
            try:
                self._adapter.update(EntityKind.CHORE, chore_id, {"direct_assignee_ids": ids})
            except RemoteError:
                _LOGGER.warning(
                    "Assignee %s was created but could not be assigned to chore %s",
                    stored.id,
                    chore_id,
                )
                try:
                    self._delete_remote(EntityKind.ASSIGNEE, stored.id)
                except RemoteError as e:
                    _LOGGER.warning("Could not remove unassigned assignee %s: %s", stored.id, e)
                    orphaned.append(stored)
                raise
            return stored

        def commit(stored: Assignee) -> None:
            self._swap(EntityKind.ASSIGNEE, draft.id, stored)
            current = self.store.get_chore(chore_id)
            if current is not None:
                ids = tuple(stored.id if i == draft.id else i for i in current.direct_assignee_ids)
                self._swap(EntityKind.CHORE, chore_id, replace(current, direct_assignee_ids=ids))
            created.append(stored)

        ok = self._mutate(
            action="add assignee",
            key=f"chore:{chore_id}:assignees",
            apply=apply,
            remote=remote,
            commit=commit,
        )
        if orphaned:
            # Still exists remotely.
            self.store.replace_collection(EntityKind.ASSIGNEE, [*self.store.assignees, *orphaned])
        return created[0] if ok else None

    def rename_assignee(self, assignee_id: int, name: str) -> bool:
        assignee = self._require(EntityKind.ASSIGNEE, assignee_id)
        name = self._unique_assignee_name(name, ignore_id=assignee_id)
        return self._update(
            EntityKind.ASSIGNEE,
            replace(assignee, name=name),
            {"name": name},
            action="rename assignee",
            key=f"assignee:{assignee_id}:name",
        )

    def delete_assignee(self, assignee_id: int) -> bool:
        """Remove the assignee from every chore and category, then delete it."""

        self._require(EntityKind.ASSIGNEE, assignee_id)
        chores = [c for c in self.store.chores if assignee_id in c.direct_assignee_ids]
        categories = [c for c in self.store.categories if assignee_id in c.default_assignee_ids]

        def apply() -> None:
            self.store.replace_collection(
                EntityKind.CHORE,
                [
                    replace(c, direct_assignee_ids=without_id(c.direct_assignee_ids, assignee_id))
                    for c in self.store.chores
                ],
            )
            self.store.replace_collection(
                EntityKind.CATEGORY,
                [
                    replace(c, default_assignee_ids=without_id(c.default_assignee_ids, assignee_id))
                    for c in self.store.categories
                ],
            )
            self.store.replace_collection(
                EntityKind.ASSIGNEE, [a for a in self.store.assignees if a.id != assignee_id]
            )

        steps: list[tuple[str, Callable[[], None]]] = []
        for chore in chores:
            ids = without_id(chore.direct_assignee_ids, assignee_id)
            steps.append((f"chore {chore.id}", self._updater(EntityKind.CHORE, chore.id, ids)))
        for category in categories:
            ids = without_id(category.default_assignee_ids, assignee_id)
            steps.append(
                (f"category {category.id}", self._updater(EntityKind.CATEGORY, category.id, ids))
            )
        steps.append(
            (
                f"assignee {assignee_id}",
                lambda: self._delete_remote(EntityKind.ASSIGNEE, assignee_id),
            )
        )

        return self._mutate(
            action="delete assignee",
            key=f"assignee:{assignee_id}:delete",
            apply=apply,
            remote=lambda: self._run_steps("delete assignee", steps),
        )

    # Categories

    def add_category(self, name: str) -> Category | None:
        name = _required(name, "name", "Category name")
        draft = Category(id=next(self._temp_ids), name=name, household_code=self.household_code)
        return self._create(EntityKind.CATEGORY, draft, action="add category", key="category:add")

    def rename_category(self, category_id: int, name: str) -> bool:
        category = self._require(EntityKind.CATEGORY, category_id)
        name = _required(name, "name", "Category name")
        return self._update(
            EntityKind.CATEGORY,
            replace(category, name=name),
            {"name": name},
            action="rename category",
            key=f"category:{category_id}:name",
        )

    def toggle_category_assignee(self, category_id: int, assignee_id: int) -> bool:
        category = self._require(EntityKind.CATEGORY, category_id)
        self._require(EntityKind.ASSIGNEE, assignee_id)

        ids = toggle_id(category.default_assignee_ids, assignee_id)
        return self._update(
            EntityKind.CATEGORY,
            replace(category, default_assignee_ids=ids),
            {"default_assignee_ids": ids},
            action="update category assignees",
            key=f"category:{category_id}:assignees",
        )

    def toggle_category_open(self, category_id: int) -> bool:
        """Expand or collapse a category. Local only; returns the new open state."""

        category = self._require(EntityKind.CATEGORY, category_id)
        toggled = replace(category, is_open=not category.is_open)
        self._swap(EntityKind.CATEGORY, category_id, toggled)
        return not category.is_open

    def delete_category(self, category_id: int) -> bool:
        """Move the category's chores to uncategorized, then delete it."""

        self._require(EntityKind.CATEGORY, category_id)
        members = [c for c in self.store.chores if c.category_id == category_id]

        def apply() -> None:
            self.store.replace_collection(
                EntityKind.CHORE,
                [
                    replace(c, category_id=None) if c.category_id == category_id else c
                    for c in self.store.chores
                ],
            )
            self.store.replace_collection(
                EntityKind.CATEGORY, [c for c in self.store.categories if c.id != category_id]
            )

        steps: list[tuple[str, Callable[[], None]]] = [
            (
                f"chore {chore.id}",
                lambda chore_id=chore.id: self._update_remote(
                    EntityKind.CHORE, chore_id, {"category_id": None}
                ),
            )
            for chore in members
        ]
        steps.append(
            (
                f"category {category_id}",
                lambda: self._delete_remote(EntityKind.CATEGORY, category_id),
            )
        )

        return self._mutate(
            action="delete category",
            key=f"category:{category_id}:delete",
            apply=apply,
            remote=lambda: self._run_steps("delete category", steps),
        )

    # Repair

    def repair_references(self) -> int | None:
        """Strip assignee and category references that no longer resolve, then reload.

        Safe to run any number of times. Returns how many rows were rewritten, or None if a
        remote call failed (the banner is set and needs_repair stays as it was).
        """

        code = self.household_code
        fixed = 0
        try:
            assignees = self._adapter.list_by_household(EntityKind.ASSIGNEE, code)
            assignee_ids = {a.id for a in assignees}
            categories = self._adapter.list_by_household(EntityKind.CATEGORY, code)
            category_ids = {c.id for c in categories}

            for category in categories:
                kept = tuple(i for i in category.default_assignee_ids if i in assignee_ids)
                if kept != category.default_assignee_ids:
                    self._adapter.update(
                        EntityKind.CATEGORY, category.id, {"default_assignee_ids": kept}
                    )
                    fixed += 1

            for chore in self._adapter.list_by_household(EntityKind.CHORE, code):
                fields: dict[str, Any] = {}
                kept = tuple(i for i in chore.direct_assignee_ids if i in assignee_ids)
                if kept != chore.direct_assignee_ids:
                    fields["direct_assignee_ids"] = kept
                if chore.category_id is not None and chore.category_id not in category_ids:
                    fields["category_id"] = None
                if fields:
                    self._adapter.update(EntityKind.CHORE, chore.id, fields)
                    fixed += 1

            self.store.load(self._adapter, code)
        except RemoteError as e:
            _LOGGER.warning("Repairing %s failed after %d rows: %s", code, fixed, e)
            self.error = failure_message("repair household data")
            return None

        if fixed:
            _LOGGER.info("Repaired %d rows in %s", fixed, code)
        self.needs_repair = False
        return fixed

    # Internals

    def _mutate(
        self,
        *,
        action: str,
        key: str,
        apply: Callable[[], None],
        remote: Callable[[], Any],
        commit: Callable[[Any], None] | None = None,
    ) -> bool:
        """Snapshot, apply locally, call remote, roll back on failure.

        Returns False without doing anything while the same control key is still in flight.
        """

        if key in self._pending:
            _LOGGER.debug("Ignoring %s, %s is still pending", action, key)
            return False

        snapshot = self.store.snapshot()
        self._pending.add(key)
        try:
            apply()
            try:
                result = remote()
            except RemoteError as e:
                self.store.restore(snapshot)
                self.error = failure_message(action)
                _LOGGER.warning("Rolled back %s: %s", action, e)
                return False

            if commit is not None:
                commit(result)
            return True
        finally:
            self._pending.discard(key)

    def _create(self, kind: EntityKind, draft: _E, *, action: str, key: str) -> _E | None:
        created: list[_E] = []

        def apply() -> None:
            self.store.replace_collection(kind, [*self._collection(kind), draft])

        def commit(stored: _E) -> None:
            # Keep client-only state of the draft (a new category starts open).
            if isinstance(stored, Category) and isinstance(draft, Category):
                stored = replace(stored, is_open=draft.is_open)
            self._swap(kind, draft.id, stored)
            created.append(stored)

        ok = self._mutate(
            action=action,
            key=key,
            apply=apply,
            remote=lambda: self._adapter.insert(kind, draft),
            commit=commit,
        )
        return created[0] if ok else None

    def _update(
        self,
        kind: EntityKind,
        updated: Entity,
        fields: dict[str, Any],
        *,
        action: str,
        key: str,
    ) -> bool:
        return self._mutate(
            action=action,
            key=key,
            apply=lambda: self._swap(kind, updated.id, updated),
            remote=lambda: self._adapter.update(kind, updated.id, fields),
        )

    def _updater(
        self, kind: EntityKind, entity_id: int, ids: tuple[int, ...]
    ) -> Callable[[], None]:
        field = "direct_assignee_ids" if kind is EntityKind.CHORE else "default_assignee_ids"
        return lambda: self._update_remote(kind, entity_id, {field: ids})

    def _update_remote(self, kind: EntityKind, entity_id: int, fields: dict[str, Any]) -> None:
        """Cleanup update for one row. A row that is already gone has nothing left to clean."""

        try:
            self._adapter.update(kind, entity_id, fields)
        except RemoteNotFoundError:
            _LOGGER.debug("%s %s was already deleted, skipping update", kind.value, entity_id)

    def _run_steps(self, action: str, steps: list[tuple[str, Callable[[], None]]]) -> None:
        done: list[str] = []
        for label, step in steps:
            try:
                step()
            except RemoteError:
                if done:
                    self.needs_repair = True
                    _LOGGER.warning(
                        "%s stopped at %s; already applied remotely: %s",
                        action,
                        label,
                        ", ".join(done),
                    )
                raise
            done.append(label)

    def _delete_remote(self, kind: EntityKind, entity_id: int) -> None:
        try:
            self._adapter.delete(kind, entity_id)
        except RemoteNotFoundError:
            # Already gone, e.g. deleted by another session.
            _LOGGER.debug("%s %s was already deleted", kind.value, entity_id)

    def _collection(self, kind: EntityKind) -> list[Any]:
        if kind is EntityKind.ASSIGNEE:
            return self.store.assignees
        if kind is EntityKind.CATEGORY:
            return self.store.categories
        return self.store.chores

    def _swap(self, kind: EntityKind, entity_id: int, entity: Entity) -> None:
        self.store.replace_collection(
            kind, [entity if e.id == entity_id else e for e in self._collection(kind)]
        )

    def _require(self, kind: EntityKind, entity_id: int) -> Any:
        found = next((e for e in self._collection(kind) if e.id == entity_id), None)
        if found is None:
            label = _LABELS[kind]
            raise ValidationError(f"{label}_id", f"Unknown {label}: {entity_id}")
        return found

    def _unique_assignee_name(self, name: str, ignore_id: int | None = None) -> str:
        name = _required(name, "name", "Assignee name")
        for assignee in self.store.assignees:
            if assignee.id != ignore_id and assignee.name.lower() == name.lower():
                raise ValidationError("name", f"An assignee named {assignee.name!r} already exists")
        return name
