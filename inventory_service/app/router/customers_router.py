from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import customers_crud as crud
from ..schemas.customers_schemas import CustomerCreate, CustomerListResponse, CustomerResponse

router = APIRouter(prefix="/api/customers", tags=["customers"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=CustomerListResponse)
def get_customers(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_customers(db, current_user.org_id, search)


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    customer: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_customer(db, current_user.org_id, current_user.user_id, customer)


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.delete_customer(db, current_user.org_id, current_user.user_id, customer_id)
