from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    # 8 integer digits, 2 decimals
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(None, max_length=100)
    stock: int = Field(..., ge=0)
    sku: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = Field(None, max_length=500)


class ProductCreate(ProductBase):
    active: Optional[bool] = None


class ProductUpdate(ProductBase):
    # full replace; `active` only changes when supplied
    active: Optional[bool] = None


class ProductRead(ProductBase):
    product_id: str
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer("price", when_used="json")
    def price_as_number(self, value: Decimal) -> float:
        return float(value)
