from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.helpers.audit_helper import log_action
from shared.utils.enums import AuditAction, AuditResourceType
from shared.utils.exceptions import NotFoundError
from ..models.products import Product
from ..models.suppliers import Supplier
from ..schemas.suppliers_schemas import (
    SupplierCreate, SupplierListResponse, SupplierOut, SupplierResponse, SupplierUpdate)


def get_supplier_by_id(db: Session, supplier_id: UUID, org_id: UUID) -> Optional[Supplier]:
    return db.query(Supplier).filter(
        Supplier.id == supplier_id,
        Supplier.org_id == org_id
    ).first()


def _product_count(db: Session, supplier_id: UUID) -> int:
    return db.query(func.count(Product.id)).filter(Product.supplier_id == supplier_id).scalar() or 0


def _to_out(db: Session, supplier: Supplier) -> SupplierOut:
    out = SupplierOut.model_validate(supplier)
    out.total_products = _product_count(db, supplier.id)
    return out


def get_suppliers(db: Session, org_id: UUID, search: Optional[str] = None) -> SupplierListResponse:
    query = db.query(Supplier).filter(Supplier.org_id == org_id)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Supplier.name.ilike(search_term),
                Supplier.contact_person.ilike(search_term),
                Supplier.email.ilike(search_term),
            )
        )
    suppliers = query.order_by(Supplier.name.asc()).all()
    return SupplierListResponse(suppliers=[_to_out(db, s) for s in suppliers])


def get_supplier(db: Session, org_id: UUID, supplier_id: UUID) -> SupplierResponse:
    supplier = get_supplier_by_id(db, supplier_id, org_id)
    if not supplier:
        raise NotFoundError("Supplier not found")
    return SupplierResponse(supplier=_to_out(db, supplier))


def create_supplier(db: Session, org_id: UUID, user_id: UUID, supplier: SupplierCreate) -> SupplierResponse:
    db_supplier = Supplier(org_id=org_id, **supplier.model_dump())
    db.add(db_supplier)
    db.flush()
    log_action(db, org_id, user_id, AuditAction.SUPPLIER_CREATED, AuditResourceType.SUPPLIER, db_supplier.id,
               new_value=supplier.model_dump())
    db.commit()
    db.refresh(db_supplier)
    return SupplierResponse(supplier=_to_out(db, db_supplier))


def update_supplier(db: Session, org_id: UUID, user_id: UUID, supplier_id: UUID, supplier: SupplierUpdate) -> SupplierResponse:
    db_supplier = get_supplier_by_id(db, supplier_id, org_id)
    if not db_supplier:
        raise NotFoundError("Supplier not found")
    update_data = supplier.model_dump(exclude_unset=True)
    for k, v in update_data.items():
        if k == "name" and v is None:
            continue
        setattr(db_supplier, k, v)
    log_action(db, org_id, user_id, AuditAction.SUPPLIER_UPDATED, AuditResourceType.SUPPLIER, db_supplier.id,
               new_value=update_data)
    db.commit()
    db.refresh(db_supplier)
    return SupplierResponse(supplier=_to_out(db, db_supplier))


def delete_supplier(db: Session, org_id: UUID, user_id: UUID, supplier_id: UUID):
    db_supplier = get_supplier_by_id(db, supplier_id, org_id)
    if not db_supplier:
        raise NotFoundError("Supplier not found")

    # products keep existing without a supplier
    db.query(Product).filter(Product.supplier_id == supplier_id).update(
        {Product.supplier_id: None}, synchronize_session=False)
    log_action(db, org_id, user_id, AuditAction.SUPPLIER_DELETED, AuditResourceType.SUPPLIER, db_supplier.id,
               old_value={"name": db_supplier.name})
    db.delete(db_supplier)
    db.commit()
    return {"message": "Supplier deleted successfully"}
