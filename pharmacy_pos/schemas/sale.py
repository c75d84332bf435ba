from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class SaleItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    unit_sell_price: float = Field(..., ge=0)

    @field_validator("unit_sell_price")
    @classmethod
    def validate_cents(cls, value: float) -> float:
        if round(value, 2) != value:
            raise ValueError("Price must have at most two decimal places")
        return value


class SaleCreate(BaseModel):
    # Emptiness and payment method are checked by the sale engine so the
    # caller gets the domain error instead of a schema error
    items: List[SaleItemCreate]
    payment_method: str


class SaleItemResponse(BaseModel):
    id: str
    sale_id: str
    product_id: str
    product_name: Optional[str] = None
    quantity: int
    unit_sell_price: float
    unit_buy_price: float
    total_sell_price: float
    item_profit: float
    created_at: datetime

    class Config:
        from_attributes = True


class SaleResponse(BaseModel):
    id: str
    total_amount: float
    total_profit: float
    payment_method: str
    status: str
    created_at: datetime
    items: List[SaleItemResponse] = []

    class Config:
        from_attributes = True


class SalesSummary(BaseModel):
    total_sales: int
    total_amount: float
    total_profit: float


class TodaySalesResponse(BaseModel):
    sales: List[SaleResponse]
    summary: SalesSummary
