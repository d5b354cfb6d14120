import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.enums import StockTransferStatus
from .base import utcnow


class StockTransfer(Base):
    __tablename__ = "stock_transfers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="CASCADE"), nullable=False)
    from_location_id = Column(Uuid, ForeignKey(
        "locations.id", ondelete="SET NULL"), nullable=True)
    to_location_id = Column(Uuid, ForeignKey(
        "locations.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False)
    status = Column(String(16), default=StockTransferStatus.COMPLETED.value)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    product = relationship("Product")
    from_location = relationship("Location", foreign_keys=[from_location_id])
    to_location = relationship("Location", foreign_keys=[to_location_id])
