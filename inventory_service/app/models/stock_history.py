import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from shared.core.database import Base
from .base import utcnow


class StockHistory(Base):
    __tablename__ = "stock_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Uuid, ForeignKey(
        "locations.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Uuid, nullable=True)
    previous_quantity = Column(Integer, nullable=False, default=0)
    quantity_change = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    change_type = Column(String(16), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
