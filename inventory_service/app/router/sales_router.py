from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import sales_crud as crud
from ..schemas.sales_schemas import SaleCreate, SaleListResponse, SaleRequest, SaleResponse

router = APIRouter(prefix="/api/sales", tags=["sales"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=SaleListResponse)
def get_sales(
    params: SaleRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_sales(db, current_user.org_id, params)


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(
    sale: SaleCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_sale(db, current_user.org_id, current_user.user_id, sale)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_sale(db, current_user.org_id, sale_id)
