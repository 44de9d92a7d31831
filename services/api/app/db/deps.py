from __future__ import annotations

from collections.abc import Generator

from fastapi import HTTPException
from services.api.app.db.database import db_session
from services.api.app.db.models import Category, Household
from sqlalchemy.orm import Session


def get_db() -> Generator[Session, None, None]:
    db = db_session()
    try:
        yield db
    finally:
        db.close()


def require_household(db: Session, household_id: str) -> Household:
    household = db.get(Household, household_id)
    if household is None:
        raise HTTPException(status_code=409, detail=f"Unknown household: {household_id}")
    return household


def require_category(db: Session, household_id: str, category_id: int | None) -> None:
    """Reject a chore category reference that does not resolve inside the household."""

    if category_id is None:
        return

    category = db.get(Category, category_id)
    if category is None or category.household_id != household_id:
        raise HTTPException(status_code=409, detail=f"Unknown category: {category_id}")
