import logging
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.helpers.audit_helper import log_action
from shared.utils.enums import AuditAction, AuditResourceType, ChangeType, StockTransferStatus
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.stock_transfers import StockTransfer
from ..schemas.stock_transfers_schemas import (
    StockTransferCreate, StockTransferListResponse, StockTransferOut, StockTransferResponse)
from . import locations_crud, stock_levels_crud

logger = logging.getLogger(__name__)


def to_transfer_out(transfer: StockTransfer) -> StockTransferOut:
    out = StockTransferOut.model_validate(transfer)
    out.product_name = transfer.product.name if transfer.product else None
    out.from_location_name = transfer.from_location.name if transfer.from_location else None
    out.to_location_name = transfer.to_location.name if transfer.to_location else None
    return out


def get_stock_transfers(db: Session, org_id: UUID, status: str = None) -> StockTransferListResponse:
    query = (
        db.query(StockTransfer)
        .options(
            joinedload(StockTransfer.product),
            joinedload(StockTransfer.from_location),
            joinedload(StockTransfer.to_location),
        )
        .filter(StockTransfer.org_id == org_id)
    )
    if status:
        query = query.filter(StockTransfer.status == status)

    transfers = query.order_by(StockTransfer.created_at.desc()).all()
    return StockTransferListResponse(stockTransfers=[to_transfer_out(t) for t in transfers])


def create_stock_transfer(db: Session, org_id: UUID, user_id: UUID, request: StockTransferCreate) -> StockTransferResponse:
    if request.from_location_id == request.to_location_id:
        raise ValidationError("Source and destination locations cannot be the same")

    from_location = locations_crud.get_location_by_id(db, request.from_location_id, org_id)
    to_location = locations_crud.get_location_by_id(db, request.to_location_id, org_id)
    if not from_location or not to_location:
        raise NotFoundError("Location not found")

    source = stock_levels_crud.get_stock_level(
        db, org_id, request.product_id, from_location.id)
    if not source or source.quantity < request.quantity:
        raise ValidationError("Insufficient stock for product")

    note = request.notes or f"Transfer {from_location.name} -> {to_location.name}"
    stock_levels_crud.apply_stock_change(
        db, org_id, request.product_id, from_location.id, request.quantity, ChangeType.REMOVE.value,
        user_id=user_id, notes=note, commit=False)
    stock_levels_crud.apply_stock_change(
        db, org_id, request.product_id, to_location.id, request.quantity, ChangeType.ADD.value,
        user_id=user_id, notes=note, commit=False)

    transfer = StockTransfer(
        org_id=org_id,
        product_id=request.product_id,
        from_location_id=from_location.id,
        to_location_id=to_location.id,
        quantity=request.quantity,
        status=StockTransferStatus.COMPLETED.value,
        notes=request.notes,
        created_by=user_id,
    )
    db.add(transfer)
    db.flush()
    log_action(db, org_id, user_id, AuditAction.TRANSFER_COMPLETED, AuditResourceType.STOCK_TRANSFER, transfer.id,
               new_value={"product_id": request.product_id, "quantity": request.quantity,
                          "from_location_id": from_location.id, "to_location_id": to_location.id})
    db.commit()
    db.refresh(transfer)

    logger.info("Transferred %s of product %s from %s to %s",
                request.quantity, request.product_id, from_location.id, to_location.id)
    return StockTransferResponse(stockTransfer=to_transfer_out(transfer))
