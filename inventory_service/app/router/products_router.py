from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import products_crud, stock_levels_crud
from ..schemas.products_schemas import (
    ProductCreate, ProductListResponse, ProductRequest, ProductResponse, ProductUpdate)
from ..schemas.stock_levels_schemas import (
    StockChangeRequest, StockChangeResponse, StockHistoryListResponse, StockLevelListResponse)

router = APIRouter(prefix="/api/products", tags=["products"],
                   dependencies=[Depends(validate_current_token)])


# ---------------- List all products ----------------
@router.get("", response_model=ProductListResponse)
def get_products(
    params: ProductRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.get_products(db, current_user.org_id, params)


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.create_product(db, current_user.org_id, current_user.user_id, product)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.get_product(db, current_user.org_id, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID,
    product: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.update_product(db, current_user.org_id, current_user.user_id, product_id, product)


@router.delete("/{product_id}")
def delete_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.delete_product(db, current_user.org_id, current_user.user_id, product_id)


# ---------------- Stock ----------------
@router.get("/{product_id}/stock", response_model=StockLevelListResponse)
def get_product_stock(
    product_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return StockLevelListResponse(
        stockLevels=stock_levels_crud.get_stock_levels(db, current_user.org_id, product_id))


@router.post("/{product_id}/stock", response_model=StockChangeResponse, status_code=201)
def change_product_stock(
    product_id: UUID,
    request: StockChangeRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.change_product_stock(
        db, current_user.org_id, current_user.user_id, product_id, request)


@router.get("/{product_id}/history", response_model=StockHistoryListResponse)
def get_product_history(
    product_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return products_crud.get_product_history(db, current_user.org_id, product_id)
