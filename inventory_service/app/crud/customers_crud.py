from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.helpers.audit_helper import log_action
from shared.utils.enums import AuditAction, AuditResourceType
from shared.utils.exceptions import NotFoundError
from ..models.customers import Customer
from ..schemas.customers_schemas import CustomerCreate, CustomerListResponse, CustomerOut, CustomerResponse


def get_customers(db: Session, org_id: UUID, search: Optional[str] = None) -> CustomerListResponse:
    query = db.query(Customer).filter(Customer.org_id == org_id)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(search_term),
                Customer.email.ilike(search_term),
                Customer.phone.ilike(search_term),
            )
        )
    customers = query.order_by(Customer.created_at.desc()).all()
    return CustomerListResponse(customers=[CustomerOut.model_validate(c) for c in customers])


def create_customer(db: Session, org_id: UUID, user_id: UUID, customer: CustomerCreate) -> CustomerResponse:
    db_customer = Customer(org_id=org_id, **customer.model_dump())
    db.add(db_customer)
    db.flush()
    log_action(db, org_id, user_id, AuditAction.CUSTOMER_CREATED, AuditResourceType.CUSTOMER, db_customer.id,
               new_value={"name": db_customer.name, "email": db_customer.email})
    db.commit()
    db.refresh(db_customer)
    return CustomerResponse(customer=CustomerOut.model_validate(db_customer))


def delete_customer(db: Session, org_id: UUID, user_id: UUID, customer_id: UUID):
    db_customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.org_id == org_id
    ).first()
    if not db_customer:
        raise NotFoundError("Customer not found")
    log_action(db, org_id, user_id, AuditAction.CUSTOMER_DELETED, AuditResourceType.CUSTOMER, db_customer.id,
               old_value={"name": db_customer.name})
    db.delete(db_customer)
    db.commit()
    return {"message": "Customer deleted successfully"}
