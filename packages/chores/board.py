from __future__ import annotations

from dataclasses import dataclass, field

from packages.chores.entities import Category, Chore, EntityKind
from packages.chores.interaction import IDLE, Editing, InteractionState, selector_target
from packages.chores.resolver import assignee_names, resolve_assignees
from packages.chores.store import EntityStore


@dataclass(frozen=True, slots=True)
class ChoreRow:
    id: int
    title: str
    completed: bool
    assignee_names: list[str]
    is_inherited: bool
    selector_open: bool = False
    editing: bool = False


@dataclass(frozen=True, slots=True)
class BoardSection:
    # None for the uncategorized section.
    category_id: int | None
    name: str
    is_open: bool
    default_assignee_names: list[str] = field(default_factory=list)
    chores: list[ChoreRow] = field(default_factory=list)
    selector_open: bool = False

    @property
    def completed_count(self) -> int:
        return sum(1 for c in self.chores if c.completed)


@dataclass(frozen=True, slots=True)
class Board:
    sections: list[BoardSection]
    assignee_count: int

    @property
    def total_chores(self) -> int:
        return sum(len(s.chores) for s in self.sections)


def build_board(store: EntityStore, interaction: InteractionState = IDLE) -> Board:
    """Group chores by category for rendering.

    Effective assignees are resolved on every build. Chores whose category no longer exists
    land in the uncategorized section.
    """

    category_ids = {c.id for c in store.categories}
    open_chore = selector_target(interaction, EntityKind.CHORE)
    open_category = selector_target(interaction, EntityKind.CATEGORY)
    editing_chore = (
        interaction.target_id
        if isinstance(interaction, Editing) and interaction.kind is EntityKind.CHORE
        else None
    )

    def row(chore: Chore) -> ChoreRow:
        effective = resolve_assignees(chore, store.categories)
        return ChoreRow(
            id=chore.id,
            title=chore.title,
            completed=chore.completed,
            assignee_names=assignee_names(effective.assignee_ids, store.assignees),
            is_inherited=effective.is_inherited,
            selector_open=chore.id == open_chore,
            editing=chore.id == editing_chore,
        )

    def section(category: Category) -> BoardSection:
        return BoardSection(
            category_id=category.id,
            name=category.name,
            is_open=category.is_open,
            default_assignee_names=assignee_names(category.default_assignee_ids, store.assignees),
            chores=[row(c) for c in store.chores if c.category_id == category.id],
            selector_open=category.id == open_category,
        )

    sections = [section(c) for c in store.categories]
    uncategorized = [
        row(c) for c in store.chores if c.category_id is None or c.category_id not in category_ids
    ]
    sections.append(
        BoardSection(category_id=None, name="Uncategorized", is_open=True, chores=uncategorized)
    )

    return Board(sections=sections, assignee_count=len(store.assignees))
