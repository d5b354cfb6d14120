from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import dashboard_crud as crud
from ..schemas.dashboard_schemas import DashboardStatsResponse

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"],
                   dependencies=[Depends(validate_current_token)])


@router.get("/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_dashboard_stats(db, current_user.org_id)
