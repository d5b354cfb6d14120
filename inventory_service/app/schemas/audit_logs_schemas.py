from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel


class AuditLogRequest(BaseModel):
    page: int = 1
    limit: int = 50
    action: Optional[str] = None
    resource_type: Optional[str] = None


class AuditLogUser(BaseModel):
    email: str
    full_name: Optional[str] = None


class AuditLogOut(BaseModel):
    id: UUID
    action: str
    resource_type: str
    resource_id: Optional[UUID] = None
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[AuditLogUser] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogOut]
    pagination: Pagination
