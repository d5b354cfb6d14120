import uuid
from sqlalchemy import TIMESTAMP, Column, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship
from ..core.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    owner_id = Column(Uuid, ForeignKey(
        "users.id", ondelete="SET NULL", use_alter=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    members = relationship(
        "Users", back_populates="organization", foreign_keys="Users.org_id")
    subscriptions = relationship(
        "Subscription", back_populates="organization", cascade="all, delete-orphan")
