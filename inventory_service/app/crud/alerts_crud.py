import logging
from datetime import timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.utils.enums import AlertType
from shared.utils.exceptions import ValidationError
from ..models.alerts import Alert
from ..models.base import utcnow
from ..models.products import Product
from ..models.stock_levels import StockLevel
from ..schemas.alerts_schemas import AlertListResponse, AlertOut, AlertUpdateRequest

logger = logging.getLogger(__name__)

ALERT_LIST_LIMIT = 50
ALERT_DEDUPE_WINDOW = timedelta(hours=24)


def effective_reorder_point(product: Product, level: StockLevel) -> int:
    if level.reorder_point is not None:
        return level.reorder_point
    return product.reorder_point or 0


def classify_stock(quantity: int, reorder_point: int) -> Optional[AlertType]:
    if quantity <= 0:
        return AlertType.OUT_OF_STOCK
    if quantity <= reorder_point:
        return AlertType.LOW_STOCK
    return None


def classify_product_stock(product: Product, levels: List[StockLevel]) -> Tuple[Optional[AlertType], int]:
    """
    Product-wide status from its stock rows, using the same per-row rule as
    the alerts. Returns the status and the highest effective reorder point.
    """
    reorder_point = max(
        (effective_reorder_point(product, level) for level in levels),
        default=product.reorder_point or 0)
    if sum(level.quantity for level in levels) <= 0:
        return AlertType.OUT_OF_STOCK, reorder_point

    for level in levels:
        if classify_stock(level.quantity, effective_reorder_point(product, level)) is not None:
            return AlertType.LOW_STOCK, reorder_point
    return None, reorder_point


def _has_recent_alert(db: Session, org_id: UUID, product_id: UUID, alert_type: AlertType) -> bool:
    since = utcnow() - ALERT_DEDUPE_WINDOW
    return db.query(Alert.id).filter(
        Alert.org_id == org_id,
        Alert.product_id == product_id,
        Alert.alert_type == alert_type.value,
        Alert.created_at >= since
    ).first() is not None


def check_and_create_alerts(
        db: Session,
        org_id: UUID,
        product: Product,
        level: StockLevel,
        user_id: Optional[UUID] = None) -> List[Alert]:
    """Raise a low/out-of-stock alert for the new quantity unless one was raised in the last 24h."""
    alert_type = classify_stock(level.quantity, effective_reorder_point(product, level))
    if alert_type is None:
        return []

    if _has_recent_alert(db, org_id, product.id, alert_type):
        return []

    if alert_type == AlertType.OUT_OF_STOCK:
        message = f"{product.name} is out of stock"
    else:
        message = f"{product.name} is running low ({level.quantity} left)"

    alert = Alert(
        org_id=org_id,
        user_id=user_id,
        product_id=product.id,
        alert_type=alert_type.value,
        message=message,
    )
    db.add(alert)
    db.flush()
    logger.info("Alert %s raised for product %s in org %s",
                alert_type.value, product.id, org_id)
    return [alert]


def to_alert_out(alert: Alert) -> AlertOut:
    out = AlertOut.model_validate(alert)
    out.product_name = alert.product.name if alert.product else None
    return out


def get_alerts(db: Session, org_id: UUID, unread_only: bool = False) -> AlertListResponse:
    query = (
        db.query(Alert)
        .options(joinedload(Alert.product))
        .filter(Alert.org_id == org_id)
    )
    if unread_only:
        query = query.filter(Alert.is_read == False)

    alerts = query.order_by(Alert.created_at.desc()).limit(ALERT_LIST_LIMIT).all()
    return AlertListResponse(alerts=[to_alert_out(a) for a in alerts])


def count_unread_alerts(db: Session, org_id: UUID) -> int:
    return db.query(Alert).filter(
        Alert.org_id == org_id,
        Alert.is_read == False
    ).count()


def mark_alerts(db: Session, org_id: UUID, request: AlertUpdateRequest):
    if not request.alert_ids:
        raise ValidationError("Alert IDs are required")

    updated = (
        db.query(Alert)
        .filter(Alert.org_id == org_id, Alert.id.in_(request.alert_ids))
        .update({Alert.is_read: request.mark_as_read}, synchronize_session=False)
    )
    db.commit()
    return {"message": "Alerts updated successfully", "updated": updated}
