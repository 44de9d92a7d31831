"""Shared remote row schemas (v1).

These are the rows exactly as the hosted store spells them (snake_case columns, the household
reference as household_id, assignee lists as assignee_ids). The API returns them and the chore
client validates them before translating into its own entity names.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HouseholdRowV1(BaseModel):
    id: str
    created_at: str


class ProfileRowV1(BaseModel):
    id: str
    name: str
    household_id: str
    created_at: str


class AssigneeRowV1(BaseModel):
    id: int
    name: str
    household_id: str


class CategoryRowV1(BaseModel):
    id: int
    name: str
    household_id: str
    assignee_ids: list[int] = Field(default_factory=list)


class ChoreRowV1(BaseModel):
    id: int
    title: str
    completed: bool = False
    household_id: str
    assignee_ids: list[int] = Field(default_factory=list)
    category_id: int | None = None
