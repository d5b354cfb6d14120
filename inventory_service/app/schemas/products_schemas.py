from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = "unit"
    unit_cost: Decimal = Decimal("0")
    selling_price: Decimal = Decimal("0")
    reorder_point: int = 0
    supplier_id: Optional[UUID] = None


class ProductCreate(ProductBase):
    # opening stock at the primary location
    current_quantity: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    unit_cost: Optional[Decimal] = None
    selling_price: Optional[Decimal] = None
    reorder_point: Optional[int] = None
    supplier_id: Optional[UUID] = None


class ProductOut(ProductBase):
    id: UUID
    org_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductListItem(ProductOut):
    total_quantity: int = 0
    needs_restock: bool = False
    is_out_of_stock: bool = False
    profit_margin: float = 0


class ProductListResponse(BaseModel):
    products: List[ProductListItem]
    total: int


class ProductResponse(BaseModel):
    product: ProductListItem


class ProductRequest(CommonQueryParams):
    category: Optional[str] = None
    supplier_id: Optional[UUID] = None
