from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import stock_transfers_crud as crud
from ..schemas.stock_transfers_schemas import (
    StockTransferCreate, StockTransferListResponse, StockTransferResponse)

router = APIRouter(prefix="/api/stock-transfers", tags=["stock-transfers"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=StockTransferListResponse)
def get_stock_transfers(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_stock_transfers(db, current_user.org_id, status)


@router.post("", response_model=StockTransferResponse, status_code=201)
def create_stock_transfer(
    request: StockTransferCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_stock_transfer(db, current_user.org_id, current_user.user_id, request)
