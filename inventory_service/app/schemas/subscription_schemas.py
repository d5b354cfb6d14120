from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel


class PlanOut(BaseModel):
    id: UUID
    name: str
    display_name: str
    description: Optional[str] = None
    monthly_price: Decimal
    yearly_price: Decimal
    max_team_members: int
    max_products: int
    max_locations: int
    features: List[str] = []
    is_active: bool

    class Config:
        from_attributes = True


class SubscriptionOut(BaseModel):
    id: UUID
    status: str
    trial_end_date: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    is_trial_active: bool = False
    trial_days_remaining: int = 0
    plan: Optional[PlanOut] = None

    class Config:
        from_attributes = True


class SubscriptionResponse(BaseModel):
    subscription: Optional[SubscriptionOut] = None
    plans: List[PlanOut] = []


class PlanListResponse(BaseModel):
    plans: List[PlanOut]


class ChangePlanRequest(BaseModel):
    plan_name: str


class LimitUsage(BaseModel):
    current: int
    limit: int
    reached: bool
    percentage: int
    remaining: int


class UsageLimits(BaseModel):
    teamMembers: LimitUsage
    products: LimitUsage
    locations: LimitUsage


class UsageResponse(BaseModel):
    subscription: SubscriptionOut
    limits: UsageLimits
