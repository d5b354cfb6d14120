from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import suppliers_crud as crud
from ..schemas.suppliers_schemas import (
    SupplierCreate, SupplierListResponse, SupplierResponse, SupplierUpdate)

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=SupplierListResponse)
def get_suppliers(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_suppliers(db, current_user.org_id, search)


@router.post("", response_model=SupplierResponse, status_code=201)
def create_supplier(
    supplier: SupplierCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_supplier(db, current_user.org_id, current_user.user_id, supplier)


@router.get("/{supplier_id}", response_model=SupplierResponse)
def get_supplier(
    supplier_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_supplier(db, current_user.org_id, supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
def update_supplier(
    supplier_id: UUID,
    supplier: SupplierUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.update_supplier(db, current_user.org_id, current_user.user_id, supplier_id, supplier)


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.delete_supplier(db, current_user.org_id, current_user.user_id, supplier_id)
