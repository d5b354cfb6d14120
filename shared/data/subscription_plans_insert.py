import logging
from sqlalchemy.orm import Session

from shared.models.subscriptions import SubscriptionPlan

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    {
        "name": "free",
        "display_name": "Free",
        "description": "For trying things out",
        "monthly_price": 0,
        "yearly_price": 0,
        "max_team_members": 1,
        "max_products": 50,
        "max_locations": 1,
        "features": ["Stock tracking", "Low stock alerts"],
    },
    {
        "name": "starter",
        "display_name": "Starter",
        "description": "For small shops",
        "monthly_price": 19,
        "yearly_price": 190,
        "max_team_members": 3,
        "max_products": 500,
        "max_locations": 3,
        "features": ["Stock tracking", "Low stock alerts", "Purchase orders", "CSV export"],
    },
    {
        "name": "business",
        "display_name": "Business",
        "description": "For growing teams",
        "monthly_price": 49,
        "yearly_price": 490,
        "max_team_members": 10,
        "max_products": -1,
        "max_locations": 10,
        "features": ["Everything in Starter", "Stock transfers", "Dashboard analytics"],
    },
    {
        "name": "enterprise",
        "display_name": "Enterprise",
        "description": "Unlimited everything",
        "monthly_price": 149,
        "yearly_price": 1490,
        "max_team_members": -1,
        "max_products": -1,
        "max_locations": -1,
        "features": ["Everything in Business", "Priority support"],
    },
]


def seed_subscription_plans(db: Session) -> int:
    """Insert the default plans that are missing. Returns how many were added."""
    existing = {name for (name,) in db.query(SubscriptionPlan.name).all()}
    added = 0
    for plan in DEFAULT_PLANS:
        if plan["name"] in existing:
            continue
        db.add(SubscriptionPlan(**plan))
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %s subscription plans", added)
    return added
