"""What the user is in the middle of doing.

Exactly one interaction is active at a time, so a chore selector and a category selector can
never be open together, and an input buffer belongs to the form that owns it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from packages.chores.entities import EntityKind


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class AddingChore:
    # None for the top-level form, otherwise the category's inline form.
    category_id: int | None = None
    text: str = ""


@dataclass(frozen=True, slots=True)
class AddingCategory:
    text: str = ""


@dataclass(frozen=True, slots=True)
class AddingAssignee:
    text: str = ""


@dataclass(frozen=True, slots=True)
class Editing:
    kind: EntityKind
    target_id: int
    text: str = ""


@dataclass(frozen=True, slots=True)
class SelectingAssignee:
    kind: EntityKind
    target_id: int


@dataclass(frozen=True, slots=True)
class QuickAddingAssignee:
    chore_id: int
    text: str = ""


InteractionState = (
    Idle
    | AddingChore
    | AddingCategory
    | AddingAssignee
    | Editing
    | SelectingAssignee
    | QuickAddingAssignee
)

IDLE = Idle()

_SELECTABLE = frozenset({EntityKind.CHORE, EntityKind.CATEGORY})
_WITH_TEXT = (AddingChore, AddingCategory, AddingAssignee, Editing, QuickAddingAssignee)


def type_text(state: InteractionState, text: str) -> InteractionState:
    """Update the input buffer of the active form. No-op for states without one."""

    if isinstance(state, _WITH_TEXT):
        return replace(state, text=text)
    return state


def open_selector(state: InteractionState, kind: EntityKind, target_id: int) -> InteractionState:
    """Open an assignee selector. Opening the one already open closes it."""

    if kind not in _SELECTABLE:
        raise ValueError(f"No assignee selector for {kind.value}")

    if isinstance(state, SelectingAssignee) and state.kind is kind and state.target_id == target_id:
        return IDLE
    return SelectingAssignee(kind=kind, target_id=target_id)


def start_quick_add(state: InteractionState) -> InteractionState:
    """Switch an open chore selector into its inline "new assignee" form."""

    if isinstance(state, SelectingAssignee) and state.kind is EntityKind.CHORE:
        return QuickAddingAssignee(chore_id=state.target_id)
    return state


def start_editing(kind: EntityKind, target_id: int, current_text: str) -> InteractionState:
    return Editing(kind=kind, target_id=target_id, text=current_text)


def dismiss(state: InteractionState) -> InteractionState:
    del state
    return IDLE


def selector_target(state: InteractionState, kind: EntityKind) -> int | None:
    if isinstance(state, SelectingAssignee) and state.kind is kind:
        return state.target_id
    if isinstance(state, QuickAddingAssignee) and kind is EntityKind.CHORE:
        return state.chore_id
    return None
