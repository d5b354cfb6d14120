import logging
from typing import Any, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from shared.models.audit_logs import AuditLog
from shared.utils.enums import AuditAction, AuditResourceType

logger = logging.getLogger(__name__)


def log_action(
        db: Session,
        org_id: Optional[UUID],
        user_id: Optional[UUID],
        action: AuditAction,
        resource_type: AuditResourceType,
        resource_id: Optional[UUID] = None,
        old_value: Any = None,
        new_value: Any = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None) -> AuditLog:
    """
    Add an audit row to the current transaction.

    Nothing is committed here: the row is persisted by the caller's commit,
    together with the change it describes, and disappears with it on rollback.
    """
    entry = AuditLog(
        org_id=org_id,
        user_id=user_id,
        action=action.value,
        resource_type=resource_type.value,
        resource_id=resource_id,
        old_value=jsonable_encoder(old_value) if old_value is not None else None,
        new_value=jsonable_encoder(new_value) if new_value is not None else None,
        ip_address=ip_address,
        user_agent=user_agent[:255] if user_agent else None,
    )
    db.add(entry)
    logger.debug("Audit %s on %s %s by %s", action.value, resource_type.value, resource_id, user_id)
    return entry
