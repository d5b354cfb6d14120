from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel


class LowStockItem(BaseModel):
    id: UUID
    name: str
    sku: Optional[str] = None
    total_quantity: int
    reorder_point: int


class SubscriptionSnapshot(BaseModel):
    status: str
    plan_name: Optional[str] = None
    plan_display_name: Optional[str] = None
    is_trial_active: bool = False
    trial_days_remaining: int = 0
    max_products: Optional[int] = None
    max_locations: Optional[int] = None
    max_team_members: Optional[int] = None


class DashboardStatsResponse(BaseModel):
    totalProducts: int
    lowStockProducts: int
    outOfStockProducts: int
    unreadAlerts: int
    lowStockItems: List[LowStockItem]
    subscription: Optional[SubscriptionSnapshot] = None
