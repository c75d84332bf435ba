from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import timedelta
from typing import List, Optional
from pharmacy_pos.database import get_db
from pharmacy_pos.config import settings
from pharmacy_pos.core.dates import day_bounds
from pharmacy_pos.repositories.product_repository import ProductRepository
from pharmacy_pos.repositories.sale_repository import SaleRepository
from pharmacy_pos.schemas.dashboard import (
    DashboardSummary,
    LowStockProduct,
    RecentSale,
    RecentSalesResponse,
    SalesTrend,
    CategoryShare,
)
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(db: AsyncSession = Depends(get_db)):
    """
    Main metrics for the dashboard
    Shows: today's orders / revenue / profit, catalogue size, low stock,
    revenue change against yesterday
    """
    sales = SaleRepository(db)
    products = ProductRepository(db)

    today_start, today_end = day_bounds()
    yesterday_start, yesterday_end = day_bounds(days_ago=1)

    today = await sales.summary_between(today_start, today_end)
    yesterday = await sales.summary_between(yesterday_start, yesterday_end)
    items_sold = await sales.items_sold_between(today_start, today_end)
    total_products, total_categories, low_stock = await products.counts(settings.LOW_STOCK_THRESHOLD)

    revenue_change = 0.0
    if yesterday.total_amount:
        revenue_change = (today.total_amount - yesterday.total_amount) / yesterday.total_amount * 100

    return DashboardSummary(
        today_revenue=today.total_amount,
        today_profit=today.total_profit,
        today_orders=today.total_sales,
        today_items_sold=items_sold,
        total_products=total_products,
        total_categories=total_categories,
        low_stock_count=low_stock,
        revenue_change=round(revenue_change, 2)
    )


@router.get("/low-stock", response_model=List[LowStockProduct])
async def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db)
):
    cutoff = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    products = await ProductRepository(db).low_stock(cutoff)
    return [
        LowStockProduct(
            id=p.id,
            name=p.name,
            stock=p.stock,
            category=p.category,
            sell_price=float(p.sell_price)
        )
        for p in products
    ]


@router.get("/recent-sales", response_model=RecentSalesResponse)
async def get_recent_sales(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    recent = await SaleRepository(db).recent(limit)
    return RecentSalesResponse(
        sales=[
            RecentSale(
                id=sale.id,
                total_amount=float(sale.total_amount),
                total_profit=float(sale.total_profit),
                payment_method=sale.payment_method,
                created_at=sale.created_at,
                items_count=items_count or 0
            )
            for sale, items_count in recent
        ]
    )


@router.get("/sales-trend", response_model=SalesTrend)
async def get_sales_trend(
    days: int = Query(7, ge=1, le=90),
    db: AsyncSession = Depends(get_db)
):
    """Revenue, profit and order count per day for the last `days` days, today included"""
    start, _ = day_bounds(days_ago=days - 1)
    _, end = day_bounds()
    totals = await SaleRepository(db).daily_totals(start, end)

    trend = SalesTrend(dates=[], labels=[], revenue=[], profit=[], orders=[])
    for offset in range(days):
        day = (start + timedelta(days=offset)).date()
        revenue, profit, orders = totals.get(day.isoformat(), (0.0, 0.0, 0))
        trend.dates.append(day)
        trend.labels.append(f"{day:%b} {day.day}")
        trend.revenue.append(revenue)
        trend.profit.append(profit)
        trend.orders.append(orders)
    return trend


@router.get("/categories", response_model=List[CategoryShare])
async def get_category_distribution(db: AsyncSession = Depends(get_db)):
    """Product count and sales revenue per category"""
    rows = await ProductRepository(db).category_distribution()
    return [CategoryShare(name=name, count=count, revenue=revenue) for name, count, revenue in rows]
