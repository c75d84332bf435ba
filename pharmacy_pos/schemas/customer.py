from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=3)
    email: Optional[str] = None
    address: Optional[str] = None


class CustomerResponse(CustomerCreate):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
