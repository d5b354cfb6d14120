import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from .base import utcnow


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_locations_org_name"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    is_primary = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # stock rows go away only with their product
    stock_levels = relationship(
        "StockLevel", back_populates="location", passive_deletes="all")
