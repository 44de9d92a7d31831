from __future__ import annotations

from pydantic import BaseModel, Field


class ChoreCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    household_id: str
    completed: bool = False
    assignee_ids: list[int] = Field(default_factory=list)
    category_id: int | None = None


class ChoreUpdateRequest(BaseModel):
    """Partial update. Only fields present in the request body are written.

    An explicit null category_id moves the chore to uncategorized.
    """

    title: str | None = Field(default=None, min_length=1)
    completed: bool | None = None
    assignee_ids: list[int] | None = None
    category_id: int | None = None
