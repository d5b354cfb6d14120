import logging
import random
import time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from shared.helpers.audit_helper import log_action
from shared.utils.enums import AuditAction, AuditResourceType, ChangeType, PurchaseOrderStatus
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.products import Product
from ..models.purchase_orders import PurchaseOrder, PurchaseOrderItem
from ..schemas.purchase_orders_schemas import (
    PurchaseOrderCreate, PurchaseOrderItemOut, PurchaseOrderListResponse, PurchaseOrderOut,
    PurchaseOrderResponse, PurchaseOrderStatusUpdate)
from . import stock_levels_crud
from .suppliers_crud import get_supplier_by_id

logger = logging.getLogger(__name__)

FINAL_STATUSES = {PurchaseOrderStatus.RECEIVED.value, PurchaseOrderStatus.CANCELLED.value}


def generate_order_number() -> str:
    return f"PO-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def get_purchase_order_by_id(db: Session, order_id: UUID, org_id: UUID) -> Optional[PurchaseOrder]:
    return (
        db.query(PurchaseOrder)
        .options(selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.product))
        .filter(PurchaseOrder.id == order_id, PurchaseOrder.org_id == org_id)
        .first()
    )


def to_purchase_order_out(order: PurchaseOrder) -> PurchaseOrderOut:
    items = []
    for item in order.items:
        item_out = PurchaseOrderItemOut.model_validate(item)
        item_out.product_name = item.product.name if item.product else None
        items.append(item_out)

    out = PurchaseOrderOut.model_validate(order)
    out.items = items
    out.total_items = len(items)
    return out


def get_purchase_orders(
        db: Session,
        org_id: UUID,
        status: Optional[str] = None,
        supplier_id: Optional[UUID] = None) -> PurchaseOrderListResponse:
    query = (
        db.query(PurchaseOrder)
        .options(selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.product))
        .filter(PurchaseOrder.org_id == org_id)
    )
    if status and status.lower() != "all":
        query = query.filter(PurchaseOrder.status == status.lower())
    if supplier_id:
        query = query.filter(PurchaseOrder.supplier_id == supplier_id)

    orders = query.order_by(PurchaseOrder.created_at.desc()).all()
    return PurchaseOrderListResponse(purchaseOrders=[to_purchase_order_out(o) for o in orders])


def get_purchase_order(db: Session, org_id: UUID, order_id: UUID) -> PurchaseOrderResponse:
    order = get_purchase_order_by_id(db, order_id, org_id)
    if not order:
        raise NotFoundError("Purchase order not found")
    return PurchaseOrderResponse(purchaseOrder=to_purchase_order_out(order))


def create_purchase_order(db: Session, org_id: UUID, user_id: UUID, order: PurchaseOrderCreate) -> PurchaseOrderResponse:
    if not (order.supplier_id or order.supplier_name) or not order.items:
        raise ValidationError("Supplier and items are required")

    supplier_name = order.supplier_name
    supplier_email = order.supplier_email
    if order.supplier_id:
        supplier = get_supplier_by_id(db, order.supplier_id, org_id)
        if not supplier:
            raise NotFoundError("Supplier not found")
        supplier_name = supplier_name or supplier.name
        supplier_email = supplier_email or supplier.email

    product_ids = {item.product_id for item in order.items}
    known = {
        pid for (pid,) in db.query(Product.id).filter(
            Product.org_id == org_id,
            Product.id.in_(product_ids)
        ).all()
    }
    missing = product_ids - known
    if missing:
        raise ValidationError(
            "Unknown products in order",
            details=[{"field": "items.product_id", "message": str(pid)} for pid in missing])

    total_amount = sum((item.unit_cost * item.quantity for item in order.items), Decimal("0"))

    db_order = PurchaseOrder(
        org_id=org_id,
        order_number=generate_order_number(),
        supplier_id=order.supplier_id,
        supplier_name=supplier_name,
        supplier_email=supplier_email,
        status=PurchaseOrderStatus.PENDING.value,
        total_amount=total_amount,
        notes=order.notes,
        created_by=user_id,
    )
    db_order.items = [
        PurchaseOrderItem(
            position=position,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
        )
        for position, item in enumerate(order.items)
    ]
    db.add(db_order)
    db.flush()
    log_action(db, org_id, user_id, AuditAction.PURCHASE_ORDER_CREATED, AuditResourceType.PURCHASE_ORDER,
               db_order.id, new_value={"order_number": db_order.order_number, "total_amount": total_amount})
    db.commit()

    logger.info("Purchase order %s created in org %s (%s items, total %s)",
                db_order.order_number, org_id, len(order.items), total_amount)
    return get_purchase_order(db, org_id, db_order.id)


def _receive_items(db: Session, org_id: UUID, user_id: UUID, order: PurchaseOrder):
    for item in order.items:
        if item.product_id is None:
            continue
        stock_levels_crud.apply_stock_change(
            db, org_id, item.product_id, None, item.quantity, ChangeType.ADD.value,
            user_id=user_id, notes=f"Purchase order {order.order_number} received", commit=False)
        item.received_quantity = item.quantity


def update_purchase_order_status(
        db: Session,
        org_id: UUID,
        user_id: UUID,
        order_id: UUID,
        request: PurchaseOrderStatusUpdate) -> PurchaseOrderResponse:
    order = get_purchase_order_by_id(db, order_id, org_id)
    if not order:
        raise NotFoundError("Purchase order not found")

    old_status = order.status
    new_status = request.status.value
    if order.status in FINAL_STATUSES:
        raise ValidationError(f"Purchase order is already {order.status}")
    if new_status == PurchaseOrderStatus.RECEIVED.value:
        if order.status != PurchaseOrderStatus.ORDERED.value:
            raise ValidationError("Order must be placed before receiving")
        _receive_items(db, org_id, user_id, order)

    order.status = new_status
    if request.notes is not None:
        order.notes = request.notes
    action = (AuditAction.PURCHASE_ORDER_RECEIVED if new_status == PurchaseOrderStatus.RECEIVED.value
              else AuditAction.PURCHASE_ORDER_UPDATED)
    log_action(db, org_id, user_id, action, AuditResourceType.PURCHASE_ORDER, order.id,
               old_value={"status": old_status}, new_value={"status": new_status})
    db.commit()

    logger.info("Purchase order %s moved to %s", order.order_number, new_status)
    return get_purchase_order(db, org_id, order.id)


def delete_purchase_order(db: Session, org_id: UUID, user_id: UUID, order_id: UUID):
    order = get_purchase_order_by_id(db, order_id, org_id)
    if not order:
        raise NotFoundError("Purchase order not found")
    if order.status == PurchaseOrderStatus.RECEIVED.value:
        raise ValidationError("Cannot delete received order")

    log_action(db, org_id, user_id, AuditAction.PURCHASE_ORDER_DELETED, AuditResourceType.PURCHASE_ORDER, order.id,
               old_value={"order_number": order.order_number, "status": order.status})
    db.delete(order)
    db.commit()
    return {"message": "Purchase order deleted successfully"}
