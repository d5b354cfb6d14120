from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import sales_crud as crud
from ..schemas.sales_schemas import BillingProductListResponse, BillingProductRequest

router = APIRouter(prefix="/api/billing", tags=["billing"],
                   dependencies=[Depends(validate_current_token)])


# ---------------- Products available for sale ----------------
@router.get("/products", response_model=BillingProductListResponse)
def get_billing_products(
    params: BillingProductRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_billing_products(db, current_user.org_id, params)
