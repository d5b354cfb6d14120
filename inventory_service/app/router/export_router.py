from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import export_crud as crud

router = APIRouter(prefix="/api/export", tags=["export"],
                   dependencies=[Depends(validate_current_token)])


@router.get("")
def export_data(
    table: str = "products",
    format: str = Query("csv"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.export_table(db, current_user.org_id, table, format, start_date, end_date)
