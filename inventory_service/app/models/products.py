import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from .base import utcnow


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("org_id", "sku", name="uq_products_org_sku"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    sku = Column(String(64), nullable=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    unit = Column(String(32), default="unit")
    unit_cost = Column(Numeric(14, 2), default=0)
    selling_price = Column(Numeric(14, 2), default=0)
    reorder_point = Column(Integer, default=0)
    supplier_id = Column(Uuid, ForeignKey(
        "suppliers.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    supplier = relationship("Supplier", back_populates="products")
    stock_levels = relationship(
        "StockLevel", back_populates="product", cascade="all, delete-orphan")
