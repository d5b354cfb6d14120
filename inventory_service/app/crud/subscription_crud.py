import logging
from datetime import datetime, timezone
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from shared.helpers.subscription_helper import (
    UNLIMITED, get_organization_subscription, get_plan_limit, get_remaining_allowed,
    get_trial_days_remaining, get_usage_percentage, has_subscription_reached_limit, is_trial_active)
from shared.models.subscriptions import Subscription, SubscriptionPlan
from shared.utils.enums import LimitType, SubscriptionStatus
from shared.utils.exceptions import SubscriptionNotFoundError, ValidationError
from ..schemas.subscription_schemas import (
    ChangePlanRequest, LimitUsage, PlanListResponse, PlanOut, SubscriptionOut,
    SubscriptionResponse, UsageLimits, UsageResponse)
from .locations_crud import count_locations
from .products_crud import count_products
from .team_crud import count_team_members

logger = logging.getLogger(__name__)

BILLING_PERIOD = relativedelta(months=1)


def to_subscription_out(subscription: Subscription) -> SubscriptionOut:
    out = SubscriptionOut.model_validate(subscription)
    out.is_trial_active = is_trial_active(subscription)
    out.trial_days_remaining = get_trial_days_remaining(subscription)
    return out


def get_active_plans(db: Session):
    return (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.is_active == True)
        .order_by(SubscriptionPlan.monthly_price.asc())
        .all()
    )


def get_plans(db: Session) -> PlanListResponse:
    return PlanListResponse(plans=[PlanOut.model_validate(p) for p in get_active_plans(db)])


def get_subscription(db: Session, org_id: UUID) -> SubscriptionResponse:
    subscription = get_organization_subscription(db, org_id)
    return SubscriptionResponse(
        subscription=to_subscription_out(subscription) if subscription else None,
        plans=[PlanOut.model_validate(p) for p in get_active_plans(db)],
    )


def _require_subscription(db: Session, org_id: UUID) -> Subscription:
    subscription = get_organization_subscription(db, org_id)
    if not subscription:
        raise SubscriptionNotFoundError()
    return subscription


def change_plan(db: Session, org_id: UUID, request: ChangePlanRequest):
    plan = db.query(SubscriptionPlan).filter(
        SubscriptionPlan.name == request.plan_name,
        SubscriptionPlan.is_active == True
    ).first()
    if not plan:
        raise ValidationError("Invalid plan")

    subscription = _require_subscription(db, org_id)
    previous = subscription.plan
    was_trial = subscription.status == SubscriptionStatus.TRIAL.value
    upgrading = (plan.monthly_price or 0) > ((previous.monthly_price or 0) if previous else 0)

    subscription.plan_id = plan.id
    if was_trial or subscription.status != SubscriptionStatus.ACTIVE.value:
        now = datetime.now(timezone.utc)
        subscription.status = SubscriptionStatus.ACTIVE.value
        subscription.trial_end_date = None
        subscription.current_period_start = now
        subscription.current_period_end = now + BILLING_PERIOD
    subscription.cancel_at_period_end = False
    db.commit()
    db.refresh(subscription)

    logger.info("Org %s moved from plan %s to %s",
                org_id, previous.name if previous else None, plan.name)

    if was_trial or upgrading:
        message = f"Upgraded to {plan.display_name} plan"
    else:
        message = f"Changed to {plan.display_name} plan"
    return {"message": message, "subscription": to_subscription_out(subscription)}


def cancel_subscription(db: Session, org_id: UUID):
    subscription = _require_subscription(db, org_id)
    if subscription.status in (SubscriptionStatus.CANCELLED.value, SubscriptionStatus.EXPIRED.value):
        raise ValidationError("Subscription is not active")

    if subscription.current_period_end:
        subscription.cancel_at_period_end = True
    else:
        subscription.status = SubscriptionStatus.CANCELLED.value
    db.commit()
    db.refresh(subscription)

    logger.info("Subscription %s of org %s cancelled", subscription.id, org_id)
    return {"message": "Subscription cancelled", "subscription": to_subscription_out(subscription)}


def _limit_usage(subscription: Subscription, usage: int, limit_type: LimitType) -> LimitUsage:
    limit = get_plan_limit(subscription.plan, limit_type)
    return LimitUsage(
        current=usage,
        limit=UNLIMITED if limit is None else limit,
        reached=has_subscription_reached_limit(subscription, usage, limit_type),
        percentage=get_usage_percentage(subscription, usage, limit_type),
        remaining=get_remaining_allowed(subscription, usage, limit_type),
    )


def get_usage(db: Session, org_id: UUID) -> UsageResponse:
    subscription = _require_subscription(db, org_id)
    return UsageResponse(
        subscription=to_subscription_out(subscription),
        limits=UsageLimits(
            teamMembers=_limit_usage(
                subscription, count_team_members(db, org_id), LimitType.TEAM_MEMBERS),
            products=_limit_usage(
                subscription, count_products(db, org_id), LimitType.PRODUCTS),
            locations=_limit_usage(
                subscription, count_locations(db, org_id), LimitType.LOCATIONS),
        ),
    )
