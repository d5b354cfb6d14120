import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from shared.helpers.exception_handler import get_db_error_code
from shared.utils.enums import ChangeType
from shared.utils.exceptions import ConflictError, NotFoundError
from ..models.alerts import Alert
from ..models.locations import Location
from ..models.products import Product
from ..models.stock_history import StockHistory
from ..models.stock_levels import StockLevel
from ..schemas.stock_levels_schemas import StockLevelOut
from . import alerts_crud, locations_crud

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3


def compute_new_quantity(existing: Optional[int], delta: int, change_type: str) -> int:
    """
    New on-hand quantity for a stock change.

    Without an existing row the delta is taken verbatim for every change
    type, so a first `remove` of 5 stores 5. With a row, `add` increments,
    `remove` decrements and clamps at zero, and anything else sets the
    quantity to the delta.
    """
    if existing is None:
        return delta
    if change_type == ChangeType.ADD.value:
        return existing + delta
    if change_type == ChangeType.REMOVE.value:
        return max(0, existing - delta)
    return delta


def get_stock_level(db: Session, org_id: UUID, product_id: UUID, location_id: UUID) -> Optional[StockLevel]:
    return db.query(StockLevel).filter(
        StockLevel.org_id == org_id,
        StockLevel.product_id == product_id,
        StockLevel.location_id == location_id
    ).first()


def get_product_total_quantity(db: Session, org_id: UUID, product_id: UUID) -> int:
    levels = db.query(StockLevel.quantity).filter(
        StockLevel.org_id == org_id,
        StockLevel.product_id == product_id
    ).all()
    return sum(q for (q,) in levels)


def to_stock_level_out(level: StockLevel) -> StockLevelOut:
    out = StockLevelOut.model_validate(level)
    out.location_name = level.location.name if level.location else None
    return out


def _get_product(db: Session, org_id: UUID, product_id: UUID) -> Product:
    product = db.query(Product).filter(
        Product.id == product_id,
        Product.org_id == org_id
    ).first()
    if not product:
        raise NotFoundError("Product not found")
    return product


def get_stock_levels(db: Session, org_id: UUID, product_id: UUID) -> List[StockLevelOut]:
    _get_product(db, org_id, product_id)
    levels = (
        db.query(StockLevel)
        .join(Location, Location.id == StockLevel.location_id)
        .filter(
            StockLevel.org_id == org_id,
            StockLevel.product_id == product_id
        )
        .order_by(Location.is_primary.desc(), Location.name.asc())
        .all()
    )
    return [to_stock_level_out(level) for level in levels]


def _upsert_stock_level(
        db: Session,
        org_id: UUID,
        product_id: UUID,
        location_id: UUID,
        delta: int,
        change_type: str,
        reorder_point: Optional[int]) -> Tuple[StockLevel, int]:
    """Read-compute-write one stock row. Returns the row and the previous quantity."""
    level = get_stock_level(db, org_id, product_id, location_id)
    previous = level.quantity if level else None
    new_quantity = compute_new_quantity(previous, delta, change_type)

    if level is None:
        level = StockLevel(
            org_id=org_id,
            product_id=product_id,
            location_id=location_id,
            quantity=new_quantity,
            reorder_point=reorder_point,
        )
        db.add(level)
    else:
        level.quantity = new_quantity
        if reorder_point is not None:
            level.reorder_point = reorder_point

    db.flush()
    return level, previous or 0


def apply_stock_change(
        db: Session,
        org_id: UUID,
        product_id: UUID,
        location_id: Optional[UUID],
        quantity: int,
        change_type: str,
        user_id: Optional[UUID] = None,
        notes: Optional[str] = None,
        reorder_point: Optional[int] = None,
        commit: bool = True) -> Tuple[StockLevel, List[Alert]]:
    """
    Apply a stock delta for one (product, location) and persist it.

    The location defaults to the organization's primary one. The row update
    is a compare-and-swap on `StockLevel.version`; a lost race, either on
    the update or on the first insert of the row, is retried from a fresh
    read.
    """
    product = _get_product(db, org_id, product_id)

    if location_id is None:
        location = locations_crud.get_or_create_primary_location(db, org_id)
    else:
        location = locations_crud.get_location_by_id(db, location_id, org_id)
        if not location:
            raise NotFoundError("Location not found")

    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        savepoint = db.begin_nested()
        try:
            level, previous = _upsert_stock_level(
                db, org_id, product.id, location.id, quantity, change_type, reorder_point)
            savepoint.commit()
            break
        except (StaleDataError, IntegrityError) as exc:
            savepoint.rollback()
            # only a duplicate first insert is a lost race
            if isinstance(exc, IntegrityError) and get_db_error_code(exc) != "23505":
                raise
            db.expire_all()
            logger.warning("Stock write conflict on product %s at %s (attempt %s/%s): %s",
                           product.id, location.id, attempt, MAX_WRITE_ATTEMPTS, exc.__class__.__name__)
    else:
        raise ConflictError(
            "Stock level was modified concurrently. Please try again.")

    db.add(StockHistory(
        org_id=org_id,
        product_id=product.id,
        location_id=location.id,
        user_id=user_id,
        previous_quantity=previous,
        quantity_change=quantity,
        new_quantity=level.quantity,
        change_type=change_type,
        notes=notes,
    ))

    alerts = alerts_crud.check_and_create_alerts(
        db, org_id, product, level, user_id)

    if commit:
        db.commit()
        db.refresh(level)

    logger.info("Stock %s %s for product %s at %s: %s -> %s",
                change_type, quantity, product.id, location.id, previous, level.quantity)
    return level, alerts
