import uuid
from sqlalchemy import (
    JSON, TIMESTAMP, Boolean, Column, ForeignKey, Integer, Numeric, String, Text, Uuid, func
)
from sqlalchemy.orm import relationship
from ..core.database import Base
from ..utils.enums import SubscriptionStatus


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    monthly_price = Column(Numeric(10, 2), default=0)
    yearly_price = Column(Numeric(10, 2), default=0)
    # -1 means unlimited
    max_team_members = Column(Integer, nullable=False, default=1)
    max_products = Column(Integer, nullable=False, default=50)
    max_locations = Column(Integer, nullable=False, default=1)
    features = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Uuid, ForeignKey("subscription_plans.id"), nullable=False)
    status = Column(String(16), nullable=False,
                    default=SubscriptionStatus.TRIAL.value)
    trial_end_date = Column(TIMESTAMP(timezone=True), nullable=True)
    current_period_start = Column(TIMESTAMP(timezone=True), nullable=True)
    current_period_end = Column(TIMESTAMP(timezone=True), nullable=True)
    cancel_at_period_end = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    plan = relationship("SubscriptionPlan", lazy="joined")
    organization = relationship("Organization", back_populates="subscriptions")
