from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from packages.shared.schemas.rows import AssigneeRowV1
from services.api.app.db.deps import get_db, require_household
from services.api.app.db.models import Assignee
from services.api.app.models.assignee import AssigneeCreateRequest, AssigneeUpdateRequest
from sqlalchemy.orm import Session

router = APIRouter()


def _row(assignee: Assignee) -> AssigneeRowV1:
    return AssigneeRowV1(id=assignee.id, name=assignee.name, household_id=assignee.household_id)


@router.get("/v1/assignees", response_model=list[AssigneeRowV1])
def list_assignees(household_id: str, db: Session = Depends(get_db)) -> list[AssigneeRowV1]:
    rows = (
        db.query(Assignee)
        .filter(Assignee.household_id == household_id)
        .order_by(Assignee.id.asc())
        .all()
    )
    return [_row(a) for a in rows]


@router.post("/v1/assignees", response_model=AssigneeRowV1, status_code=201)
def create_assignee(payload: AssigneeCreateRequest, db: Session = Depends(get_db)) -> AssigneeRowV1:
    require_household(db, payload.household_id)

    # Name uniqueness is a client-side rule; the store accepts duplicates.
    assignee = Assignee(household_id=payload.household_id, name=payload.name)
    db.add(assignee)
    db.commit()
    return _row(assignee)


@router.patch("/v1/assignees/{assignee_id}", response_model=AssigneeRowV1)
def update_assignee(
    assignee_id: int, payload: AssigneeUpdateRequest, db: Session = Depends(get_db)
) -> AssigneeRowV1:
    assignee = db.get(Assignee, assignee_id)
    if assignee is None:
        raise HTTPException(status_code=404, detail="Assignee not found")

    if payload.name is not None:
        assignee.name = payload.name

    db.commit()
    return _row(assignee)


@router.delete("/v1/assignees/{assignee_id}", status_code=204)
def delete_assignee(assignee_id: int, db: Session = Depends(get_db)) -> Response:
    assignee = db.get(Assignee, assignee_id)
    if assignee is None:
        raise HTTPException(status_code=404, detail="Assignee not found")

    db.delete(assignee)
    db.commit()
    return Response(status_code=204)
