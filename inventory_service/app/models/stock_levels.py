import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from .base import utcnow


class StockLevel(Base):
    __tablename__ = "stock_levels"
    __table_args__ = (
        UniqueConstraint("org_id", "product_id", "location_id",
                         name="uq_stock_levels_org_product_location"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="CASCADE"), nullable=False)
    location_id = Column(Uuid, ForeignKey("locations.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    reorder_point = Column(Integer, nullable=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    product = relationship("Product", back_populates="stock_levels")
    location = relationship("Location", back_populates="stock_levels")

    # UPDATE ... WHERE version = :old, StaleDataError when another writer won
    __mapper_args__ = {"version_id_col": version}
