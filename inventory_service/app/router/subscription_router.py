from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_owner, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import subscription_crud as crud
from ..schemas.subscription_schemas import (
    ChangePlanRequest, PlanListResponse, SubscriptionResponse, UsageResponse)

router = APIRouter(prefix="/api/subscription", tags=["subscription"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=SubscriptionResponse)
def get_subscription(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_owner)
):
    return crud.get_subscription(db, current_user.org_id)


@router.put("")
def change_plan(
    request: ChangePlanRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_owner)
):
    return crud.change_plan(db, current_user.org_id, request)


@router.delete("")
def cancel_subscription(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_owner)
):
    return crud.cancel_subscription(db, current_user.org_id)


@router.get("/plans", response_model=PlanListResponse)
def get_plans(db: Session = Depends(get_db)):
    return crud.get_plans(db)


@router.get("/usage", response_model=UsageResponse)
def get_usage(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_usage(db, current_user.org_id)
