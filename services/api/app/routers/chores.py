from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from packages.shared.schemas.rows import ChoreRowV1
from services.api.app.db.deps import get_db, require_category, require_household
from services.api.app.db.models import Chore
from services.api.app.models.chore import ChoreCreateRequest, ChoreUpdateRequest
from sqlalchemy.orm import Session

router = APIRouter()


def _row(chore: Chore) -> ChoreRowV1:
    return ChoreRowV1(
        id=chore.id,
        title=chore.title,
        completed=chore.completed,
        household_id=chore.household_id,
        assignee_ids=list(chore.assignee_ids or []),
        category_id=chore.category_id,
    )


@router.get("/v1/chores", response_model=list[ChoreRowV1])
def list_chores(household_id: str, db: Session = Depends(get_db)) -> list[ChoreRowV1]:
    rows = (
        db.query(Chore)
        .filter(Chore.household_id == household_id)
        .order_by(Chore.id.asc())
        .all()
    )
    return [_row(c) for c in rows]


@router.post("/v1/chores", response_model=ChoreRowV1, status_code=201)
def create_chore(payload: ChoreCreateRequest, db: Session = Depends(get_db)) -> ChoreRowV1:
    require_household(db, payload.household_id)
    require_category(db, payload.household_id, payload.category_id)

    chore = Chore(
        household_id=payload.household_id,
        title=payload.title,
        completed=payload.completed,
        assignee_ids=list(payload.assignee_ids),
        category_id=payload.category_id,
    )
    db.add(chore)
    db.commit()
    return _row(chore)


@router.patch("/v1/chores/{chore_id}", response_model=ChoreRowV1)
def update_chore(
    chore_id: int, payload: ChoreUpdateRequest, db: Session = Depends(get_db)
) -> ChoreRowV1:
    chore = db.get(Chore, chore_id)
    if chore is None:
        raise HTTPException(status_code=404, detail="Chore not found")

    fields = payload.model_dump(exclude_unset=True)

    if "category_id" in fields:
        require_category(db, chore.household_id, fields["category_id"])
        chore.category_id = fields["category_id"]
    if fields.get("title") is not None:
        chore.title = fields["title"]
    if fields.get("completed") is not None:
        chore.completed = fields["completed"]
    if fields.get("assignee_ids") is not None:
        chore.assignee_ids = list(fields["assignee_ids"])

    db.commit()
    return _row(chore)


@router.delete("/v1/chores/{chore_id}", status_code=204)
def delete_chore(chore_id: int, db: Session = Depends(get_db)) -> Response:
    chore = db.get(Chore, chore_id)
    if chore is None:
        raise HTTPException(status_code=404, detail="Chore not found")

    db.delete(chore)
    db.commit()
    return Response(status_code=204)
