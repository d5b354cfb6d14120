from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import audit_logs_crud as crud
from ..schemas.audit_logs_schemas import AuditLogListResponse, AuditLogRequest

router = APIRouter(prefix="/api/audit-logs", tags=["audit-logs"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=AuditLogListResponse)
def get_audit_logs(
    params: AuditLogRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.get_audit_logs(db, current_user.org_id, params)
