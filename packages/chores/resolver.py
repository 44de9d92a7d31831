from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from packages.chores.entities import Assignee, Category, Chore


@dataclass(frozen=True, slots=True)
class EffectiveAssignees:
    assignee_ids: tuple[int, ...]
    is_inherited: bool


UNASSIGNED = EffectiveAssignees(assignee_ids=(), is_inherited=False)


def resolve_assignees(chore: Chore, categories: Iterable[Category]) -> EffectiveAssignees:
    """Who a chore is actually assigned to.

    Direct assignees override the category. With none, the chore inherits its category's
    defaults. A category_id that no longer resolves counts as no category.
    """

    if chore.direct_assignee_ids:
        return EffectiveAssignees(assignee_ids=chore.direct_assignee_ids, is_inherited=False)

    if chore.category_id is not None:
        category = next((c for c in categories if c.id == chore.category_id), None)
        if category is not None and category.default_assignee_ids:
            return EffectiveAssignees(
                assignee_ids=category.default_assignee_ids, is_inherited=True
            )

    return UNASSIGNED


def assignee_names(assignee_ids: Iterable[int], assignees: Iterable[Assignee]) -> list[str]:
    by_id = {a.id: a.name for a in assignees}
    return [by_id[i] for i in assignee_ids if i in by_id]
