from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from packages.shared.schemas.rows import CategoryRowV1
from services.api.app.db.deps import get_db, require_household
from services.api.app.db.models import Category
from services.api.app.models.category import CategoryCreateRequest, CategoryUpdateRequest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

_LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _row(category: Category) -> CategoryRowV1:
    return CategoryRowV1(
        id=category.id,
        name=category.name,
        household_id=category.household_id,
        assignee_ids=list(category.assignee_ids or []),
    )


@router.get("/v1/categories", response_model=list[CategoryRowV1])
def list_categories(household_id: str, db: Session = Depends(get_db)) -> list[CategoryRowV1]:
    rows = (
        db.query(Category)
        .filter(Category.household_id == household_id)
        .order_by(Category.id.asc())
        .all()
    )
    return [_row(c) for c in rows]


@router.post("/v1/categories", response_model=CategoryRowV1, status_code=201)
def create_category(payload: CategoryCreateRequest, db: Session = Depends(get_db)) -> CategoryRowV1:
    require_household(db, payload.household_id)

    category = Category(
        household_id=payload.household_id,
        name=payload.name,
        assignee_ids=list(payload.assignee_ids),
    )
    db.add(category)
    db.commit()
    return _row(category)


@router.patch("/v1/categories/{category_id}", response_model=CategoryRowV1)
def update_category(
    category_id: int, payload: CategoryUpdateRequest, db: Session = Depends(get_db)
) -> CategoryRowV1:
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    if payload.name is not None:
        category.name = payload.name
    if payload.assignee_ids is not None:
        category.assignee_ids = list(payload.assignee_ids)

    db.commit()
    return _row(category)


@router.delete("/v1/categories/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)) -> Response:
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    db.delete(category)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        _LOGGER.warning("Refusing to delete category %s, chores still reference it", category_id)
        raise HTTPException(status_code=409, detail="Category still has chores") from e

    return Response(status_code=204)
