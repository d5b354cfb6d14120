import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.enums import PurchaseOrderStatus
from .base import utcnow


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = Column(String(64), nullable=False)
    supplier_id = Column(Uuid, ForeignKey(
        "suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_name = Column(String(200), nullable=True)
    supplier_email = Column(String(200), nullable=True)
    status = Column(String(16), default=PurchaseOrderStatus.PENDING.value)
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship("PurchaseOrderItem", back_populates="purchase_order",
                         cascade="all, delete-orphan", order_by="PurchaseOrderItem.position")


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    purchase_order_id = Column(Uuid, ForeignKey(
        "purchase_orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(14, 2), nullable=False)
    received_quantity = Column(Integer, nullable=False, default=0)

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    product = relationship("Product")
