from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import locations_crud as crud
from ..schemas.locations_schemas import (
    LocationCreate, LocationListResponse, LocationResponse, LocationUpdate)

router = APIRouter(prefix="/api/locations", tags=["locations"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=LocationListResponse)
def get_locations(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_locations(db, current_user.org_id)


@router.post("", response_model=LocationResponse, status_code=201)
def create_location(
    location: LocationCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
    _: UserToken = Depends(allow_admin)
):
    return crud.create_location(db, current_user.org_id, current_user.user_id, location)


@router.put("/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: UUID,
    location: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
    _: UserToken = Depends(allow_admin)
):
    return crud.update_location(db, current_user.org_id, current_user.user_id, location_id, location)


@router.delete("/{location_id}")
def delete_location(
    location_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token),
    _: UserToken = Depends(allow_admin)
):
    return crud.delete_location(db, current_user.org_id, current_user.user_id, location_id)
