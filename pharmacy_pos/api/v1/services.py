from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from pharmacy_pos.database import get_db
from pharmacy_pos.config import settings
from pharmacy_pos.core.dates import day_bounds
from pharmacy_pos.core.exceptions import ServiceNotFound, ConflictError
from pharmacy_pos.repositories.catalog_repository import ServiceRepository, to_service_sale_response
from pharmacy_pos.schemas.service import (
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
    ServiceSaleCreate,
    ServiceSaleResponse,
    ServiceSalesToday,
    ServiceStatusResponse,
    ServiceStats,
    ServiceSalesStats,
)
from pharmacy_pos.schemas.pagination import PaginatedResponse
import logging

router_services = APIRouter()
router_service_sales = APIRouter()
logger = logging.getLogger(__name__)


@router_services.get("/", response_model=List[ServiceResponse])
async def list_services(active_only: bool = False, db: AsyncSession = Depends(get_db)):
    services = await ServiceRepository(db).list(active_only=active_only)
    return [ServiceResponse.model_validate(s) for s in services]


@router_services.post("/", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(service_data: ServiceCreate, db: AsyncSession = Depends(get_db)):
    service = await ServiceRepository(db).create(service_data)
    logger.info(f"Service {service.name} created")
    return ServiceResponse.model_validate(service)


@router_services.get("/stats", response_model=ServiceStats)
async def get_service_stats(db: AsyncSession = Depends(get_db)):
    """Catalogue counts and per-category figures for active services"""
    summary, categories = await ServiceRepository(db).stats()
    return ServiceStats(summary=summary, categories=categories)


@router_services.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str, db: AsyncSession = Depends(get_db)):
    service = await ServiceRepository(db).get_by_id(service_id)
    if not service:
        raise ServiceNotFound(service_id)
    return ServiceResponse.model_validate(service)


@router_services.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(service_id: str, patch: ServiceUpdate, db: AsyncSession = Depends(get_db)):
    repo = ServiceRepository(db)
    service = await repo.get_by_id(service_id)
    if not service:
        raise ServiceNotFound(service_id)
    service = await repo.apply_patch(service, patch)
    return ServiceResponse.model_validate(service)


@router_services.patch("/{service_id}/toggle-status", response_model=ServiceStatusResponse)
async def toggle_service_status(service_id: str, db: AsyncSession = Depends(get_db)):
    repo = ServiceRepository(db)
    service = await repo.get_by_id(service_id)
    if not service:
        raise ServiceNotFound(service_id)

    service = await repo.toggle_active(service)
    state = "activated" if service.is_active else "deactivated"
    logger.info(f"Service {service.id} {state}")
    return ServiceStatusResponse(
        id=service.id,
        is_active=service.is_active,
        message=f"Service {state} successfully"
    )


@router_services.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(service_id: str, db: AsyncSession = Depends(get_db)):
    repo = ServiceRepository(db)
    if not await repo.get_by_id(service_id):
        raise ServiceNotFound(service_id)
    if await repo.has_sales(service_id):
        raise ConflictError("Cannot delete service with existing sales records")
    await repo.delete(service_id)
    logger.info(f"Service {service_id} deleted")


@router_service_sales.post("/", response_model=ServiceSaleResponse, status_code=status.HTTP_201_CREATED)
async def create_service_sale(sale_data: ServiceSaleCreate, db: AsyncSession = Depends(get_db)):
    """Record a rendered service; the service must exist and be active"""
    repo = ServiceRepository(db)
    service = await repo.get_by_id(sale_data.service_id)
    if not service or not service.is_active:
        raise ServiceNotFound(sale_data.service_id)

    sale = await repo.record_sale(service, sale_data)
    logger.info(f"Service sale {sale.id} recorded: {service.name} x{sale.quantity} by {sale.served_by}")
    return to_service_sale_response(sale, service)


@router_service_sales.get("/stats", response_model=ServiceSalesStats)
async def get_service_sales_stats(db: AsyncSession = Depends(get_db)):
    """All-time and today's service sales, with the five highest-earning services"""
    start, end = day_bounds()
    return await ServiceRepository(db).sales_stats(start, end)


@router_service_sales.get("/", response_model=PaginatedResponse[ServiceSaleResponse])
async def list_service_sales(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db)
):
    sales, total = await ServiceRepository(db).list_sales(page, page_size)
    return PaginatedResponse[ServiceSaleResponse].build(sales, total, page, page_size)


@router_service_sales.get("/today", response_model=ServiceSalesToday)
async def get_today_service_sales(db: AsyncSession = Depends(get_db)):
    start, end = day_bounds()
    sales = await ServiceRepository(db).sales_between(start, end)
    return ServiceSalesToday(
        sales=sales,
        total_sales=len(sales),
        total_amount=round(sum(s.total_amount for s in sales), 2)
    )
