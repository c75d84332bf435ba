from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pharmacy_pos.database import get_db
from pharmacy_pos.config import settings
from pharmacy_pos.api.deps import get_sale_engine
from pharmacy_pos.core.dates import day_bounds
from pharmacy_pos.core.exceptions import SaleNotFound
from pharmacy_pos.repositories.sale_repository import SaleRepository
from pharmacy_pos.schemas.sale import SaleCreate, SaleResponse, TodaySalesResponse
from pharmacy_pos.schemas.pagination import PaginatedResponse
from pharmacy_pos.services.sale_service import SaleTransactionEngine
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    engine: SaleTransactionEngine = Depends(get_sale_engine)
):
    """
    Submit a sale.
    Stock is checked and decremented in the same transaction as the sale
    is written; any failure leaves the database unchanged.
    """
    logger.info(f"Received sale request: {len(sale_data.items)} item(s), {sale_data.payment_method}")
    return await engine.submit_sale(sale_data.items, sale_data.payment_method)


@router.get("/", response_model=PaginatedResponse[SaleResponse])
async def list_sales(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    """List sales, newest first, with their items"""
    sales, total = await SaleRepository(db).list_with_items(page, page_size)
    return PaginatedResponse[SaleResponse].build(sales, total, page, page_size)


@router.get("/today", response_model=TodaySalesResponse)
async def get_today_sales(db: AsyncSession = Depends(get_db)):
    """Today's sales and totals"""
    start, end = day_bounds()
    repo = SaleRepository(db)
    return TodaySalesResponse(
        sales=await repo.list_between(start, end),
        summary=await repo.summary_between(start, end)
    )


@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(sale_id: str, db: AsyncSession = Depends(get_db)):
    sale = await SaleRepository(db).get_with_items(sale_id)
    if sale is None:
        raise SaleNotFound(sale_id)
    return sale
