from collections import defaultdict
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.helpers.subscription_helper import (
    get_organization_subscription, get_trial_days_remaining, is_trial_active)
from shared.models.subscriptions import Subscription
from shared.utils.enums import AlertType
from ..models.products import Product
from ..models.stock_levels import StockLevel
from ..schemas.dashboard_schemas import DashboardStatsResponse, LowStockItem, SubscriptionSnapshot
from .alerts_crud import classify_product_stock, count_unread_alerts

LOW_STOCK_ITEMS_LIMIT = 5


def subscription_snapshot(subscription: Optional[Subscription]) -> Optional[SubscriptionSnapshot]:
    if subscription is None:
        return None
    plan = subscription.plan
    return SubscriptionSnapshot(
        status=subscription.status,
        plan_name=plan.name if plan else None,
        plan_display_name=plan.display_name if plan else None,
        is_trial_active=is_trial_active(subscription),
        trial_days_remaining=get_trial_days_remaining(subscription),
        max_products=plan.max_products if plan else None,
        max_locations=plan.max_locations if plan else None,
        max_team_members=plan.max_team_members if plan else None,
    )


def _stock_ratio(item: LowStockItem) -> float:
    if item.reorder_point <= 0:
        return 0.0 if item.total_quantity <= 0 else float("inf")
    return item.total_quantity / item.reorder_point


def get_dashboard_stats(db: Session, org_id: UUID) -> DashboardStatsResponse:
    products = db.query(Product).filter(Product.org_id == org_id).all()
    levels_by_product = defaultdict(list)
    for level in db.query(StockLevel).filter(StockLevel.org_id == org_id).all():
        levels_by_product[level.product_id].append(level)

    low_stock = 0
    out_of_stock = 0
    low_items = []
    for product in products:
        levels = levels_by_product[product.id]
        status, reorder_point = classify_product_stock(product, levels)
        if status == AlertType.OUT_OF_STOCK:
            out_of_stock += 1
        elif status == AlertType.LOW_STOCK:
            low_stock += 1
        if status is not None:
            quantity = sum(level.quantity for level in levels)
            low_items.append(LowStockItem(
                id=product.id,
                name=product.name,
                sku=product.sku,
                total_quantity=quantity,
                reorder_point=reorder_point,
            ))

    low_items.sort(key=_stock_ratio)

    return DashboardStatsResponse(
        totalProducts=len(products),
        lowStockProducts=low_stock,
        outOfStockProducts=out_of_stock,
        unreadAlerts=count_unread_alerts(db, org_id),
        lowStockItems=low_items[:LOW_STOCK_ITEMS_LIMIT],
        subscription=subscription_snapshot(get_organization_subscription(db, org_id)),
    )
