import math
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from .alerts_schemas import AlertOut


def coerce_quantity(value: Any) -> int:
    """Lenient integer parsing; anything non-numeric counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


class StockChangeRequest(BaseModel):
    quantity: Any = 0
    change_type: str
    location_id: Optional[UUID] = None
    reorder_point: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def parse_quantity(cls, value):
        return coerce_quantity(value)


class StockLevelOut(BaseModel):
    id: UUID
    org_id: UUID
    product_id: UUID
    location_id: UUID
    location_name: Optional[str] = None
    quantity: int
    reorder_point: Optional[int] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockLevelListResponse(BaseModel):
    stockLevels: List[StockLevelOut]


class StockChangeResponse(BaseModel):
    stockLevel: StockLevelOut
    alerts: List[AlertOut] = []


class StockHistoryOut(BaseModel):
    id: UUID
    product_id: UUID
    location_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    previous_quantity: int
    quantity_change: int
    new_quantity: int
    change_type: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockHistoryListResponse(BaseModel):
    history: List[StockHistoryOut]
