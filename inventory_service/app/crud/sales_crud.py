import logging
import random
import time
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from shared.helpers.audit_helper import log_action
from shared.utils.enums import AuditAction, AuditResourceType, ChangeType
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.customers import Customer
from ..models.products import Product
from ..models.sales import Sale, SaleItem
from ..models.stock_levels import StockLevel
from ..schemas.sales_schemas import (
    BillingProductListResponse, BillingProductOut, BillingProductRequest, SaleCreate,
    SaleItemOut, SaleListResponse, SaleOut, SaleRequest, SaleResponse)
from . import locations_crud, stock_levels_crud

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 500


def _window(offset: int, limit: int) -> Tuple[int, int]:
    return max(offset, 0), min(max(limit, 1), MAX_PAGE_SIZE)


def generate_sale_number() -> str:
    return f"SALE-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def get_sale_by_id(db: Session, sale_id: UUID, org_id: UUID) -> Optional[Sale]:
    return (
        db.query(Sale)
        .options(
            selectinload(Sale.items).selectinload(SaleItem.product),
            joinedload(Sale.customer),
        )
        .filter(Sale.id == sale_id, Sale.org_id == org_id)
        .first()
    )


def to_sale_out(sale: Sale) -> SaleOut:
    items = []
    for item in sale.items:
        item_out = SaleItemOut.model_validate(item)
        if item.product:
            item_out.product_name = item.product.name
            item_out.product_sku = item.product.sku
        items.append(item_out)

    out = SaleOut.model_validate(sale)
    out.items = items
    out.gross_profit = (sale.total or 0) - (sale.cost_of_goods or 0)
    if sale.customer:
        out.customer_name = sale.customer.name
        out.customer_email = sale.customer.email
    return out


def get_sales(db: Session, org_id: UUID, params: SaleRequest) -> SaleListResponse:
    query = (
        db.query(Sale)
        .options(
            selectinload(Sale.items).selectinload(SaleItem.product),
            joinedload(Sale.customer),
        )
        .filter(Sale.org_id == org_id)
    )
    if params.customer_id:
        query = query.filter(Sale.customer_id == params.customer_id)
    if params.start_date:
        query = query.filter(Sale.sale_date >= params.start_date)
    if params.end_date:
        query = query.filter(Sale.sale_date <= params.end_date)

    offset, limit = _window(params.offset, params.limit)
    sales = (
        query
        .order_by(Sale.sale_date.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return SaleListResponse(sales=[to_sale_out(s) for s in sales])


def get_sale(db: Session, org_id: UUID, sale_id: UUID) -> SaleResponse:
    sale = get_sale_by_id(db, sale_id, org_id)
    if not sale:
        raise NotFoundError("Sale not found")
    return SaleResponse(sale=to_sale_out(sale))


def _resolve_location_id(db: Session, org_id: UUID, location_id: Optional[UUID]) -> Optional[UUID]:
    if location_id is None:
        primary = locations_crud.get_primary_location(db, org_id)
        return primary.id if primary else None
    if not locations_crud.get_location_by_id(db, location_id, org_id):
        raise NotFoundError("Location not found")
    return location_id


def _check_availability(
        db: Session,
        org_id: UUID,
        products: Dict[UUID, Product],
        requested: Dict[Tuple[UUID, Optional[UUID]], int]):
    for (product_id, location_id), quantity in requested.items():
        level = None
        if location_id is not None:
            level = stock_levels_crud.get_stock_level(db, org_id, product_id, location_id)
        if level is None or level.quantity < quantity:
            raise ValidationError(f"Insufficient stock for {products[product_id].name}")


def create_sale(db: Session, org_id: UUID, user_id: UUID, sale: SaleCreate) -> SaleResponse:
    """
    Record a sale and take its items out of stock.

    Every line is checked against the stock row it sells from before
    anything is written; the stock itself moves through the reconciler as a
    `remove`, so history and alerts follow the usual rules.
    """
    if not sale.items:
        raise ValidationError("Sale items are required")

    if sale.customer_id:
        customer = db.query(Customer.id).filter(
            Customer.id == sale.customer_id,
            Customer.org_id == org_id
        ).first()
        if not customer:
            raise NotFoundError("Customer not found")

    product_ids = {item.product_id for item in sale.items}
    products = {
        p.id: p for p in db.query(Product).filter(
            Product.org_id == org_id,
            Product.id.in_(product_ids)
        ).all()
    }
    missing = product_ids - set(products)
    if missing:
        raise ValidationError(
            "Unknown products in sale",
            details=[{"field": "items.product_id", "message": str(pid)} for pid in missing])

    lines = []
    requested = defaultdict(int)
    for item in sale.items:
        gross = item.unit_price * item.quantity
        if item.discount > gross:
            raise ValidationError(
                "Discount cannot exceed the line total",
                details=[{"field": "items.discount", "message": str(item.product_id)}])
        location_id = _resolve_location_id(db, org_id, item.location_id)
        requested[(item.product_id, location_id)] += item.quantity
        lines.append((item, location_id, gross - item.discount))

    _check_availability(db, org_id, products, requested)

    subtotal = sum((total for _, _, total in lines), Decimal("0"))
    cost_of_goods = sum(
        ((products[item.product_id].unit_cost or Decimal("0")) * item.quantity for item, _, _ in lines),
        Decimal("0"))
    tax_amount = Decimal("0")
    discount_amount = Decimal("0")

    db_sale = Sale(
        org_id=org_id,
        user_id=user_id,
        customer_id=sale.customer_id,
        sale_number=generate_sale_number(),
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=subtotal + tax_amount - discount_amount,
        cost_of_goods=cost_of_goods,
        payment_method=sale.payment_method,
        payment_status=sale.payment_status.value,
        notes=sale.notes,
    )
    db_sale.items = [
        SaleItem(
            position=position,
            product_id=item.product_id,
            location_id=location_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
            total_price=line_total,
            unit_cost=products[item.product_id].unit_cost or Decimal("0"),
        )
        for position, (item, location_id, line_total) in enumerate(lines)
    ]
    db.add(db_sale)
    db.flush()

    for item, location_id, _ in lines:
        stock_levels_crud.apply_stock_change(
            db, org_id, item.product_id, location_id, item.quantity, ChangeType.REMOVE.value,
            user_id=user_id, notes=f"Sale {db_sale.sale_number}", commit=False)

    log_action(db, org_id, user_id, AuditAction.SALE_CREATED, AuditResourceType.SALE, db_sale.id,
               new_value={"sale_number": db_sale.sale_number, "total": db_sale.total,
                          "items": len(lines)})
    db.commit()

    logger.info("Sale %s recorded in org %s (%s items, total %s)",
                db_sale.sale_number, org_id, len(lines), db_sale.total)
    return get_sale(db, org_id, db_sale.id)


def get_billing_products(db: Session, org_id: UUID, params: BillingProductRequest) -> BillingProductListResponse:
    """Products that can be sold right now: anything with stock on hand."""
    totals = (
        db.query(
            StockLevel.product_id.label("product_id"),
            func.sum(StockLevel.quantity).label("quantity"))
        .filter(StockLevel.org_id == org_id)
        .group_by(StockLevel.product_id)
        .subquery()
    )
    query = (
        db.query(Product, totals.c.quantity)
        .join(totals, totals.c.product_id == Product.id)
        .filter(Product.org_id == org_id, totals.c.quantity > 0)
    )
    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(Product.name.ilike(search_term), Product.sku.ilike(search_term)))
    if params.category:
        query = query.filter(Product.category == params.category)

    offset, limit = _window(params.offset, params.limit)
    rows = query.order_by(Product.name.asc()).offset(offset).limit(limit).all()
    return BillingProductListResponse(products=[
        BillingProductOut(
            id=product.id,
            name=product.name,
            sku=product.sku,
            category=product.category,
            unit=product.unit,
            unit_cost=product.unit_cost or 0,
            selling_price=product.selling_price or 0,
            current_quantity=int(quantity),
        )
        for product, quantity in rows
    ])
