from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.rows import HouseholdRowV1, ProfileRowV1
from services.api.app.db.deps import get_db, require_household
from services.api.app.db.models import Household, Profile
from services.api.app.models.household import HouseholdCreateRequest, ProfileCreateRequest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

_LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/households/{household_id}", response_model=HouseholdRowV1)
def get_household(household_id: str, db: Session = Depends(get_db)) -> HouseholdRowV1:
    household = db.get(Household, household_id)
    if household is None:
        raise HTTPException(status_code=404, detail="Household not found")

    return HouseholdRowV1(id=household.id, created_at=household.created_at.isoformat())


@router.post("/v1/households", response_model=HouseholdRowV1, status_code=201)
def create_household(
    payload: HouseholdCreateRequest, db: Session = Depends(get_db)
) -> HouseholdRowV1:
    if db.get(Household, payload.id) is not None:
        raise HTTPException(status_code=409, detail="Household already exists")

    household = Household(id=payload.id)
    db.add(household)
    try:
        db.commit()
    except IntegrityError as e:
        # Another client created the same code between our check and insert.
        db.rollback()
        raise HTTPException(status_code=409, detail="Household already exists") from e

    _LOGGER.info("Created household %s", household.id)
    return HouseholdRowV1(id=household.id, created_at=household.created_at.isoformat())


@router.post("/v1/profiles", response_model=ProfileRowV1, status_code=201)
def create_profile(payload: ProfileCreateRequest, db: Session = Depends(get_db)) -> ProfileRowV1:
    require_household(db, payload.household_id)

    profile = Profile(id=uuid4().hex, household_id=payload.household_id, name=payload.name)
    db.add(profile)
    db.commit()

    return ProfileRowV1(
        id=profile.id,
        name=profile.name,
        household_id=profile.household_id,
        created_at=profile.created_at.isoformat(),
    )
