import math
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from shared.models.audit_logs import AuditLog
from ..schemas.audit_logs_schemas import (
    AuditLogListResponse, AuditLogOut, AuditLogRequest, AuditLogUser, Pagination)

MAX_PAGE_SIZE = 200


def to_audit_log_out(entry: AuditLog) -> AuditLogOut:
    return AuditLogOut(
        id=entry.id,
        action=entry.action,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        old_value=entry.old_value,
        new_value=entry.new_value,
        ip_address=entry.ip_address,
        created_at=entry.created_at,
        user=AuditLogUser(email=entry.user.email, full_name=entry.user.full_name) if entry.user else None,
    )


def get_audit_logs(db: Session, org_id: UUID, params: AuditLogRequest) -> AuditLogListResponse:
    page = max(params.page, 1)
    limit = min(max(params.limit, 1), MAX_PAGE_SIZE)
    query = db.query(AuditLog).filter(AuditLog.org_id == org_id)
    if params.action:
        query = query.filter(AuditLog.action.ilike(f"%{params.action}%"))
    if params.resource_type:
        query = query.filter(AuditLog.resource_type == params.resource_type)

    total = query.count()
    logs = (
        query
        .options(joinedload(AuditLog.user))
        .order_by(AuditLog.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return AuditLogListResponse(
        logs=[to_audit_log_out(entry) for entry in logs],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit),
        ),
    )
