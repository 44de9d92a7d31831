from __future__ import annotations

from pydantic import BaseModel, Field


class AssigneeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    household_id: str


class AssigneeUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
