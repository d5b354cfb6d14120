import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.enums import PaymentStatus
from .base import utcnow


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, nullable=True)
    customer_id = Column(Uuid, ForeignKey(
        "customers.id", ondelete="SET NULL"), nullable=True, index=True)
    sale_number = Column(String(64), nullable=False, unique=True)
    sale_date = Column(DateTime(timezone=True), default=utcnow, index=True)
    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(14, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(14, 2), nullable=False, default=0)
    total = Column(Numeric(14, 2), nullable=False, default=0)
    cost_of_goods = Column(Numeric(14, 2), nullable=False, default=0)
    payment_method = Column(String(32), nullable=True)
    payment_status = Column(String(16), default=PaymentStatus.PAID.value)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    customer = relationship("Customer")
    items = relationship("SaleItem", back_populates="sale",
                         cascade="all, delete-orphan", order_by="SaleItem.position")


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = Column(Uuid, ForeignKey(
        "sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="SET NULL"), nullable=True, index=True)
    location_id = Column(Uuid, ForeignKey(
        "locations.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    discount = Column(Numeric(14, 2), nullable=False, default=0)
    total_price = Column(Numeric(14, 2), nullable=False)
    # unit cost at the time of sale
    unit_cost = Column(Numeric(14, 2), nullable=False, default=0)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")
