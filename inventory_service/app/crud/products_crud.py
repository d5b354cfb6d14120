import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.helpers.audit_helper import log_action
from shared.helpers.subscription_helper import ensure_within_limit
from shared.utils.enums import AuditAction, AuditResourceType, ChangeType, LimitType
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.products import Product
from ..models.stock_history import StockHistory
from ..models.stock_levels import StockLevel
from ..models.suppliers import Supplier
from ..schemas.products_schemas import (
    ProductCreate, ProductListItem, ProductListResponse, ProductRequest, ProductResponse, ProductUpdate)
from ..schemas.stock_levels_schemas import (
    StockChangeRequest, StockChangeResponse, StockHistoryListResponse, StockHistoryOut)
from . import alerts_crud, stock_levels_crud

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


# ----------------- Build Filters for Products -----------------
def build_product_filters(org_id: UUID, params: ProductRequest):
    filters = [Product.org_id == org_id]

    if params.category and params.category.lower() != "all":
        filters.append(Product.category == params.category)

    if params.supplier_id:
        filters.append(Product.supplier_id == params.supplier_id)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                Product.name.ilike(search_term),
                Product.sku.ilike(search_term),
            )
        )
    return filters


def count_products(db: Session, org_id: UUID) -> int:
    return db.query(func.count(Product.id)).filter(Product.org_id == org_id).scalar() or 0


def get_total_quantities(db: Session, org_id: UUID, product_ids: Optional[List[UUID]] = None) -> Dict[UUID, int]:
    query = (
        db.query(StockLevel.product_id, func.coalesce(func.sum(StockLevel.quantity), 0))
        .filter(StockLevel.org_id == org_id)
    )
    if product_ids is not None:
        query = query.filter(StockLevel.product_id.in_(product_ids))
    rows = query.group_by(StockLevel.product_id).all()
    return {product_id: int(total) for product_id, total in rows}


def profit_margin(unit_cost, selling_price) -> float:
    if not selling_price or selling_price <= 0:
        return 0
    return round(float((selling_price - (unit_cost or 0)) / selling_price * 100), 1)


def to_list_item(product: Product, total_quantity: int) -> ProductListItem:
    item = ProductListItem.model_validate(product)
    item.total_quantity = total_quantity
    item.needs_restock = total_quantity <= (product.reorder_point or 0)
    item.is_out_of_stock = total_quantity == 0
    item.profit_margin = profit_margin(product.unit_cost, product.selling_price)
    return item


def get_product_by_id(db: Session, product_id: UUID, org_id: UUID) -> Optional[Product]:
    return db.query(Product).filter(
        Product.id == product_id,
        Product.org_id == org_id
    ).first()


def get_products(db: Session, org_id: UUID, params: ProductRequest) -> ProductListResponse:
    base_query = db.query(Product).filter(*build_product_filters(org_id, params))

    total = base_query.with_entities(func.count(Product.id)).scalar()

    products = (
        base_query
        .order_by(Product.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    totals = get_total_quantities(db, org_id, [p.id for p in products])
    return ProductListResponse(
        products=[to_list_item(p, totals.get(p.id, 0)) for p in products],
        total=total)


def get_product(db: Session, org_id: UUID, product_id: UUID) -> ProductResponse:
    product = get_product_by_id(db, product_id, org_id)
    if not product:
        raise NotFoundError("Product not found")
    total = stock_levels_crud.get_product_total_quantity(db, org_id, product.id)
    return ProductResponse(product=to_list_item(product, total))


def _validate_supplier(db: Session, org_id: UUID, supplier_id: Optional[UUID]):
    if supplier_id is None:
        return
    exists = db.query(Supplier.id).filter(
        Supplier.id == supplier_id,
        Supplier.org_id == org_id
    ).first()
    if not exists:
        raise ValidationError("Supplier does not exist")


def create_product(db: Session, org_id: UUID, user_id: UUID, product: ProductCreate) -> ProductResponse:
    ensure_within_limit(db, org_id, LimitType.PRODUCTS, count_products(db, org_id))
    _validate_supplier(db, org_id, product.supplier_id)

    db_product = Product(org_id=org_id, **product.model_dump(exclude={"current_quantity"}))
    db.add(db_product)
    db.flush()

    # opening stock goes through the reconciler so it gets a history row
    if product.current_quantity is not None:
        stock_levels_crud.apply_stock_change(
            db, org_id, db_product.id, None, product.current_quantity, ChangeType.SET.value,
            user_id=user_id, notes="Opening stock", commit=False)

    log_action(db, org_id, user_id, AuditAction.PRODUCT_CREATED, AuditResourceType.PRODUCT, db_product.id,
               new_value={"name": db_product.name, "sku": db_product.sku})
    db.commit()
    db.refresh(db_product)
    logger.info("Product %s created in org %s", db_product.id, org_id)
    total = stock_levels_crud.get_product_total_quantity(db, org_id, db_product.id)
    return ProductResponse(product=to_list_item(db_product, total))


def update_product(db: Session, org_id: UUID, user_id: UUID, product_id: UUID, product: ProductUpdate) -> ProductResponse:
    db_product = get_product_by_id(db, product_id, org_id)
    if not db_product:
        raise NotFoundError("Product not found")

    update_data = product.model_dump(exclude_unset=True)
    if "supplier_id" in update_data:
        _validate_supplier(db, org_id, update_data["supplier_id"])

    for key, value in update_data.items():
        if key == "name" and value is None:
            continue
        setattr(db_product, key, value)

    log_action(db, org_id, user_id, AuditAction.PRODUCT_UPDATED, AuditResourceType.PRODUCT, db_product.id,
               new_value=update_data)
    db.commit()
    db.refresh(db_product)
    total = stock_levels_crud.get_product_total_quantity(db, org_id, db_product.id)
    return ProductResponse(product=to_list_item(db_product, total))


def delete_product(db: Session, org_id: UUID, user_id: UUID, product_id: UUID):
    db_product = get_product_by_id(db, product_id, org_id)
    if not db_product:
        raise NotFoundError("Product not found")

    log_action(db, org_id, user_id, AuditAction.PRODUCT_DELETED, AuditResourceType.PRODUCT, db_product.id,
               old_value={"name": db_product.name, "sku": db_product.sku})
    db.delete(db_product)
    db.commit()
    logger.info("Product %s deleted from org %s", product_id, org_id)
    return {"message": "Product deleted successfully"}


def change_product_stock(db: Session, org_id: UUID, user_id: UUID, product_id: UUID,
                         request: StockChangeRequest) -> StockChangeResponse:
    level, alerts = stock_levels_crud.apply_stock_change(
        db,
        org_id,
        product_id,
        request.location_id,
        request.quantity,
        request.change_type,
        user_id=user_id,
        notes=request.notes,
        reorder_point=request.reorder_point,
        commit=False,
    )
    log_action(db, org_id, user_id, AuditAction.PRODUCT_STOCK_UPDATED, AuditResourceType.PRODUCT, product_id,
               new_value={"change_type": request.change_type, "quantity": request.quantity,
                          "location_id": level.location_id, "new_quantity": level.quantity})
    db.commit()
    db.refresh(level)
    return StockChangeResponse(
        stockLevel=stock_levels_crud.to_stock_level_out(level),
        alerts=[alerts_crud.to_alert_out(a) for a in alerts])


def get_product_history(db: Session, org_id: UUID, product_id: UUID) -> StockHistoryListResponse:
    if not get_product_by_id(db, product_id, org_id):
        raise NotFoundError("Product not found")

    history = (
        db.query(StockHistory)
        .filter(
            StockHistory.org_id == org_id,
            StockHistory.product_id == product_id
        )
        .order_by(StockHistory.created_at.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )
    return StockHistoryListResponse(history=[StockHistoryOut.model_validate(h) for h in history])
