from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1)
    buy_price: float = Field(..., ge=0)
    sell_price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    barcode: Optional[str] = None


class ProductCreate(ProductBase):

    @model_validator(mode="after")
    def validate_margin(self):
        if self.buy_price > self.sell_price:
            raise ValueError("Sell price must be greater than or equal to buy price")
        return self


class ProductUpdate(BaseModel):
    """
    Partial update - only the fields present in the request are applied.
    Every mutable product field is listed here.
    """
    name: Optional[str] = Field(None, min_length=1)
    buy_price: Optional[float] = Field(None, ge=0)
    sell_price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    barcode: Optional[str] = None

    @model_validator(mode="after")
    def reject_required_nulls(self):
        cleared = [
            field for field in ("name", "buy_price", "sell_price", "stock", "category")
            if field in self.model_fields_set and getattr(self, field) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict:
        """Fields explicitly set by the caller"""
        return self.model_dump(exclude_unset=True)


class ProductResponse(ProductBase):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
