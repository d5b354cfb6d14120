import logging
import math
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.models.subscriptions import Subscription, SubscriptionPlan
from shared.utils.enums import LimitType, SubscriptionStatus
from shared.utils.exceptions import LimitReachedError

logger = logging.getLogger(__name__)

UNLIMITED = -1

PLAN_LIMIT_FIELDS = {
    LimitType.TEAM_MEMBERS: "max_team_members",
    LimitType.PRODUCTS: "max_products",
    LimitType.LOCATIONS: "max_locations",
}

LIMIT_LABELS = {
    LimitType.TEAM_MEMBERS: "team members",
    LimitType.PRODUCTS: "products",
    LimitType.LOCATIONS: "locations",
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def has_reached_limit(limit: Optional[int], usage: int) -> bool:
    """A limit of -1 (or no limit at all) is never reached."""
    if limit is None or limit == UNLIMITED:
        return False
    return usage >= limit


def get_plan_limit(plan: Optional[SubscriptionPlan], limit_type) -> Optional[int]:
    field = PLAN_LIMIT_FIELDS.get(LimitType(limit_type))
    if plan is None:
        return None
    return getattr(plan, field)


def has_subscription_reached_limit(subscription: Optional[Subscription], usage: int, limit_type) -> bool:
    # no subscription at all blocks every limited write
    if subscription is None:
        return True
    if subscription.plan is None:
        return False
    return has_reached_limit(get_plan_limit(subscription.plan, limit_type), usage)


def get_usage_percentage(subscription: Optional[Subscription], usage: int, limit_type) -> int:
    if subscription is None or subscription.plan is None:
        return 100
    if usage == 0:
        return 0
    limit = get_plan_limit(subscription.plan, limit_type)
    if limit is None or limit == UNLIMITED:
        return 0
    if limit == 0:
        return 100
    return min(100, round(usage / limit * 100))


def get_remaining_allowed(subscription: Optional[Subscription], usage: int, limit_type) -> int:
    if subscription is None or subscription.plan is None:
        return 0
    limit = get_plan_limit(subscription.plan, limit_type)
    if limit is None or limit == UNLIMITED:
        return UNLIMITED
    return max(0, limit - usage)


def is_trial_active(subscription: Optional[Subscription], now: Optional[datetime] = None) -> bool:
    if subscription is None or subscription.status != SubscriptionStatus.TRIAL.value:
        return False
    if subscription.trial_end_date is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _as_utc(subscription.trial_end_date) > now


def get_trial_days_remaining(subscription: Optional[Subscription], now: Optional[datetime] = None) -> int:
    if subscription is None or subscription.trial_end_date is None:
        return 0
    now = now or datetime.now(timezone.utc)
    seconds = (_as_utc(subscription.trial_end_date) - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def get_organization_subscription(db: Session, org_id: UUID) -> Optional[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.org_id == org_id)
        .order_by(Subscription.created_at.desc())
        .first()
    )


def ensure_within_limit(db: Session, org_id: UUID, limit_type, usage: int) -> None:
    limit_type = LimitType(limit_type)
    subscription = get_organization_subscription(db, org_id)
    if has_subscription_reached_limit(subscription, usage, limit_type):
        limit = get_plan_limit(subscription.plan if subscription else None, limit_type)
        logger.info("Org %s reached %s limit (%s/%s)",
                    org_id, limit_type.value, usage, limit)
        raise LimitReachedError(
            f"You have reached the maximum number of {LIMIT_LABELS[limit_type]} for your plan. Please upgrade to add more.",
            details={"limit_type": limit_type.value, "current": usage, "limit": limit})
