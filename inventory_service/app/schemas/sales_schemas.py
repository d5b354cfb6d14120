from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.utils.enums import PaymentStatus


class SaleItemCreate(BaseModel):
    product_id: UUID
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    # defaults to the primary location
    location_id: Optional[UUID] = None


class SaleCreate(BaseModel):
    customer_id: Optional[UUID] = None
    items: Optional[List[SaleItemCreate]] = None
    payment_method: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PAID
    notes: Optional[str] = None


class SaleRequest(BaseModel):
    customer_id: Optional[UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    offset: int = 0
    limit: int = 50


class SaleItemOut(BaseModel):
    id: UUID
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    location_id: Optional[UUID] = None
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total_price: Decimal
    unit_cost: Decimal

    class Config:
        from_attributes = True


class SaleOut(BaseModel):
    id: UUID
    sale_number: str
    sale_date: Optional[datetime] = None
    customer_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    cost_of_goods: Decimal
    gross_profit: Decimal = Decimal("0")
    payment_method: Optional[str] = None
    payment_status: str
    notes: Optional[str] = None
    user_id: Optional[UUID] = None
    items: List[SaleItemOut] = []

    class Config:
        from_attributes = True


class SaleListResponse(BaseModel):
    sales: List[SaleOut]


class SaleResponse(BaseModel):
    sale: SaleOut


class BillingProductRequest(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    offset: int = 0
    limit: int = 100


class BillingProductOut(BaseModel):
    id: UUID
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    unit_cost: Decimal
    selling_price: Decimal
    current_quantity: int


class BillingProductListResponse(BaseModel):
    products: List[BillingProductOut]
