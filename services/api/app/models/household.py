from __future__ import annotations

from pydantic import BaseModel, Field


class HouseholdCreateRequest(BaseModel):
    # Already normalized by the client (trimmed, upper-cased).
    id: str = Field(..., min_length=1)


class ProfileCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    household_id: str = Field(..., min_length=1)
