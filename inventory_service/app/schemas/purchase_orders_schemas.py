from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.utils.enums import PurchaseOrderStatus


class PurchaseOrderItemCreate(BaseModel):
    product_id: UUID
    quantity: int = Field(gt=0)
    unit_cost: Decimal = Field(ge=0)


class PurchaseOrderCreate(BaseModel):
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_email: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[PurchaseOrderItemCreate]] = None


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus
    notes: Optional[str] = None


class PurchaseOrderItemOut(BaseModel):
    id: UUID
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    quantity: int
    unit_cost: Decimal
    received_quantity: int = 0

    class Config:
        from_attributes = True


class PurchaseOrderOut(BaseModel):
    id: UUID
    order_number: str
    supplier_id: Optional[UUID] = None
    supplier_name: Optional[str] = None
    supplier_email: Optional[str] = None
    status: str
    total_amount: Decimal
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_items: int = 0
    items: List[PurchaseOrderItemOut] = []

    class Config:
        from_attributes = True


class PurchaseOrderListResponse(BaseModel):
    purchaseOrders: List[PurchaseOrderOut]


class PurchaseOrderResponse(BaseModel):
    purchaseOrder: PurchaseOrderOut
