from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import alerts_crud as crud
from ..schemas.alerts_schemas import AlertListResponse, AlertUpdateRequest

router = APIRouter(prefix="/api/alerts", tags=["alerts"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=AlertListResponse)
def get_alerts(
    unread: bool = False,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_alerts(db, current_user.org_id, unread_only=unread)


@router.patch("")
def mark_alerts(
    request: AlertUpdateRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.mark_alerts(db, current_user.org_id, request)
