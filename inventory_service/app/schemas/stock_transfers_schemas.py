from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


class StockTransferCreate(BaseModel):
    product_id: UUID
    from_location_id: UUID
    to_location_id: UUID
    quantity: int = Field(gt=0)
    notes: Optional[str] = None


class StockTransferOut(BaseModel):
    id: UUID
    product_id: UUID
    product_name: Optional[str] = None
    from_location_id: Optional[UUID] = None
    from_location_name: Optional[str] = None
    to_location_id: Optional[UUID] = None
    to_location_name: Optional[str] = None
    quantity: int
    status: str
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockTransferListResponse(BaseModel):
    stockTransfers: List[StockTransferOut]


class StockTransferResponse(BaseModel):
    stockTransfer: StockTransferOut
