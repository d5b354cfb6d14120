import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base
from .base import utcnow


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, nullable=True)
    product_id = Column(Uuid, ForeignKey(
        "products.id", ondelete="CASCADE"), nullable=False)
    alert_type = Column(String(32), nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    product = relationship("Product")
