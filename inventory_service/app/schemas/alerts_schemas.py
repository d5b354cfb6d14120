from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel


class AlertOut(BaseModel):
    id: UUID
    product_id: UUID
    product_name: Optional[str] = None
    user_id: Optional[UUID] = None
    alert_type: str
    message: str
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AlertListResponse(BaseModel):
    alerts: List[AlertOut]


class AlertUpdateRequest(BaseModel):
    alert_ids: Optional[List[UUID]] = None
    mark_as_read: bool = True
