from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import purchase_orders_crud as crud
from ..schemas.purchase_orders_schemas import (
    PurchaseOrderCreate, PurchaseOrderListResponse, PurchaseOrderResponse, PurchaseOrderStatusUpdate)

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=PurchaseOrderListResponse)
def get_purchase_orders(
    status: Optional[str] = None,
    supplier_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_purchase_orders(db, current_user.org_id, status, supplier_id)


@router.post("", response_model=PurchaseOrderResponse, status_code=201)
def create_purchase_order(
    order: PurchaseOrderCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_purchase_order(db, current_user.org_id, current_user.user_id, order)


@router.get("/{order_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_purchase_order(db, current_user.org_id, order_id)


@router.patch("/{order_id}", response_model=PurchaseOrderResponse)
def update_purchase_order_status(
    order_id: UUID,
    request: PurchaseOrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.update_purchase_order_status(
        db, current_user.org_id, current_user.user_id, order_id, request)


@router.delete("/{order_id}")
def delete_purchase_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.delete_purchase_order(db, current_user.org_id, current_user.user_id, order_id)
