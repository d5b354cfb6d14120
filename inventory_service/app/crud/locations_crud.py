import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.helpers.audit_helper import log_action
from shared.helpers.subscription_helper import ensure_within_limit
from shared.utils.enums import AuditAction, AuditResourceType, LimitType
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.locations import Location
from ..models.stock_levels import StockLevel
from ..schemas.locations_schemas import (
    LocationCreate, LocationListResponse, LocationOut, LocationResponse, LocationUpdate)

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_NAME = "Main Warehouse"


def get_location_by_id(db: Session, location_id: UUID, org_id: UUID) -> Optional[Location]:
    return db.query(Location).filter(
        Location.id == location_id,
        Location.org_id == org_id
    ).first()


def get_primary_location(db: Session, org_id: UUID) -> Optional[Location]:
    return db.query(Location).filter(
        Location.org_id == org_id,
        Location.is_primary == True
    ).first()


def get_or_create_primary_location(db: Session, org_id: UUID) -> Location:
    location = get_primary_location(db, org_id)
    if location:
        return location

    location = Location(org_id=org_id, name=DEFAULT_LOCATION_NAME, is_primary=True)
    db.add(location)
    db.flush()
    logger.info("Created default location for org %s", org_id)
    return location


def count_locations(db: Session, org_id: UUID) -> int:
    return db.query(func.count(Location.id)).filter(Location.org_id == org_id).scalar() or 0


def _demote_primary(db: Session, org_id: UUID, keep_id: Optional[UUID] = None):
    query = db.query(Location).filter(
        Location.org_id == org_id,
        Location.is_primary == True
    )
    if keep_id:
        query = query.filter(Location.id != keep_id)
    query.update({Location.is_primary: False}, synchronize_session="fetch")


def _product_counts(db: Session, org_id: UUID) -> dict:
    rows = (
        db.query(StockLevel.location_id, func.count(func.distinct(StockLevel.product_id)))
        .filter(StockLevel.org_id == org_id)
        .group_by(StockLevel.location_id)
        .all()
    )
    return {location_id: count for location_id, count in rows}


def _to_out(location: Location, total_products: int = 0) -> LocationOut:
    out = LocationOut.model_validate(location)
    out.total_products = total_products
    return out


def get_locations(db: Session, org_id: UUID) -> LocationListResponse:
    locations = (
        db.query(Location)
        .filter(Location.org_id == org_id)
        .order_by(Location.is_primary.desc(), Location.name.asc())
        .all()
    )
    counts = _product_counts(db, org_id)
    return LocationListResponse(
        locations=[_to_out(loc, counts.get(loc.id, 0)) for loc in locations])


def create_location(db: Session, org_id: UUID, user_id: UUID, location: LocationCreate) -> LocationResponse:
    ensure_within_limit(db, org_id, LimitType.LOCATIONS, count_locations(db, org_id))

    # the first location of an organization is always its primary one
    is_primary = location.is_primary or get_primary_location(db, org_id) is None
    if is_primary:
        _demote_primary(db, org_id)

    db_location = Location(org_id=org_id, **location.model_dump(exclude={"is_primary"}),
                           is_primary=is_primary)
    db.add(db_location)
    db.flush()
    log_action(db, org_id, user_id, AuditAction.LOCATION_CREATED, AuditResourceType.LOCATION, db_location.id,
               new_value=location.model_dump())
    db.commit()
    db.refresh(db_location)
    return LocationResponse(location=_to_out(db_location))


def update_location(db: Session, org_id: UUID, user_id: UUID, location_id: UUID, location: LocationUpdate) -> LocationResponse:
    db_location = get_location_by_id(db, location_id, org_id)
    if not db_location:
        raise NotFoundError("Location not found")

    update_data = location.model_dump(exclude_unset=True)
    if update_data.get("is_primary") is False and db_location.is_primary:
        raise ValidationError(
            "Cannot unset the primary location. Mark another location as primary instead.")
    if update_data.get("is_primary"):
        _demote_primary(db, org_id, keep_id=db_location.id)

    for key, value in update_data.items():
        if value is not None:
            setattr(db_location, key, value)

    log_action(db, org_id, user_id, AuditAction.LOCATION_UPDATED, AuditResourceType.LOCATION, db_location.id,
               new_value=update_data)
    db.commit()
    db.refresh(db_location)
    counts = _product_counts(db, org_id)
    return LocationResponse(location=_to_out(db_location, counts.get(db_location.id, 0)))


def delete_location(db: Session, org_id: UUID, user_id: UUID, location_id: UUID):
    db_location = get_location_by_id(db, location_id, org_id)
    if not db_location:
        raise NotFoundError("Location not found")
    if db_location.is_primary:
        raise ValidationError("Cannot delete the primary location")
    has_stock = db.query(StockLevel.id).filter(
        StockLevel.org_id == org_id,
        StockLevel.location_id == db_location.id
    ).first()
    if has_stock:
        raise ValidationError(
            "Cannot delete a location that has stock records. Transfer its stock first.")

    log_action(db, org_id, user_id, AuditAction.LOCATION_DELETED, AuditResourceType.LOCATION, db_location.id,
               old_value={"name": db_location.name})
    db.delete(db_location)
    db.commit()
    return {"message": "Location deleted successfully"}
