from pydantic import BaseModel
from typing import List
from datetime import date, datetime


class DashboardSummary(BaseModel):
    today_revenue: float
    today_profit: float
    today_orders: int
    today_items_sold: int
    total_products: int
    total_categories: int
    low_stock_count: int
    revenue_change: float  # % vs yesterday


class LowStockProduct(BaseModel):
    id: str
    name: str
    stock: int
    category: str
    sell_price: float


class RecentSale(BaseModel):
    id: str
    total_amount: float
    total_profit: float
    payment_method: str
    created_at: datetime
    items_count: int


class RecentSalesResponse(BaseModel):
    sales: List[RecentSale]


class SalesTrend(BaseModel):
    """Per-day series for the last N days, oldest first; days without sales are zero"""
    dates: List[date]
    labels: List[str]
    revenue: List[float]
    profit: List[float]
    orders: List[int]


class CategoryShare(BaseModel):
    name: str
    count: int
    revenue: float
