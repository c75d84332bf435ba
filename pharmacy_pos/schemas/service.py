from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration: int = Field(..., gt=0)


class ServiceCreate(ServiceBase):
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def reject_required_nulls(self):
        cleared = [
            field for field in ("name", "category", "price", "duration", "is_active")
            if field in self.model_fields_set and getattr(self, field) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ServiceResponse(ServiceBase):
    id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ServiceSaleCreate(BaseModel):
    service_id: str
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    served_by: str = Field(..., min_length=1)
    notes: Optional[str] = None


class ServiceSaleResponse(BaseModel):
    id: str
    service_id: str
    service_name: Optional[str] = None
    service_category: Optional[str] = None
    quantity: int
    unit_price: float
    total_amount: float
    served_by: str
    notes: Optional[str]
    created_at: datetime


class ServiceSalesToday(BaseModel):
    sales: List[ServiceSaleResponse]
    total_sales: int
    total_amount: float


class ServiceStatusResponse(BaseModel):
    id: str
    is_active: bool
    message: str


class ServiceStatsSummary(BaseModel):
    total_services: int
    active_services: int
    inactive_services: int
    total_categories: int


class ServiceCategoryStats(BaseModel):
    category: str
    service_count: int
    avg_price: float


class ServiceStats(BaseModel):
    summary: ServiceStatsSummary
    categories: List[ServiceCategoryStats]


class ServiceSalesSummary(BaseModel):
    total_sales: int
    total_revenue: float
    total_services_sold: int
    unique_services_sold: int
    today_sales: int
    today_revenue: float


class TopService(BaseModel):
    service_id: str
    service_name: Optional[str] = None
    category: Optional[str] = None
    sale_count: int
    total_revenue: float


class ServiceSalesStats(BaseModel):
    summary: ServiceSalesSummary
    top_services: List[TopService]
