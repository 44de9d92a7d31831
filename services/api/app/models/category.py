from __future__ import annotations

from pydantic import BaseModel, Field


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    household_id: str
    assignee_ids: list[int] = Field(default_factory=list)


class CategoryUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    assignee_ids: list[int] | None = None
