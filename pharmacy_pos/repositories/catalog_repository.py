from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, and_, case
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from pharmacy_pos.models import Service, ServiceSale, Customer, utcnow
from pharmacy_pos.schemas.service import (
    ServiceCreate,
    ServiceUpdate,
    ServiceSaleCreate,
    ServiceSaleResponse,
    ServiceStatsSummary,
    ServiceCategoryStats,
    ServiceSalesSummary,
    ServiceSalesStats,
    TopService,
)
from pharmacy_pos.schemas.customer import CustomerCreate


def to_service_sale_response(sale: ServiceSale, service: Optional[Service]) -> ServiceSaleResponse:
    return ServiceSaleResponse(
        id=sale.id,
        service_id=sale.service_id,
        service_name=service.name if service else None,
        service_category=service.category if service else None,
        quantity=sale.quantity,
        unit_price=float(sale.unit_price),
        total_amount=float(sale.total_amount),
        served_by=sale.served_by,
        notes=sale.notes,
        created_at=sale.created_at
    )


class ServiceRepository:
    """Services and service sales"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, service_id: str) -> Optional[Service]:
        return await self.db.get(Service, service_id)

    async def list(self, active_only: bool = False) -> List[Service]:
        query = select(Service).order_by(Service.name)
        if active_only:
            query = query.where(Service.is_active == True)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, data: ServiceCreate) -> Service:
        service = Service(**data.model_dump())
        self.db.add(service)
        await self.db.flush()
        return service

    async def apply_patch(self, service: Service, patch: ServiceUpdate) -> Service:
        changes = patch.changes()
        for field, value in changes.items():
            setattr(service, field, value)
        if changes:
            service.updated_at = utcnow()
            await self.db.flush()
        return service

    async def toggle_active(self, service: Service) -> Service:
        service.is_active = not service.is_active
        service.updated_at = utcnow()
        await self.db.flush()
        return service

    async def has_sales(self, service_id: str) -> bool:
        result = await self.db.execute(
            select(ServiceSale.id).where(ServiceSale.service_id == service_id).limit(1)
        )
        return result.first() is not None

    async def delete(self, service_id: str) -> None:
        await self.db.execute(
            delete(Service)
            .where(Service.id == service_id)
            .execution_options(synchronize_session=False)
        )

    async def stats(self) -> Tuple[ServiceStatsSummary, List[ServiceCategoryStats]]:
        """Catalogue counts, plus per-category count and average price of active services"""
        row = (
            await self.db.execute(
                select(
                    func.count(Service.id).label("total_services"),
                    func.coalesce(func.sum(case((Service.is_active == True, 1), else_=0)), 0).label("active_services"),
                    func.count(func.distinct(Service.category)).label("total_categories")
                )
            )
        ).first()
        total = row.total_services or 0
        active = int(row.active_services or 0)
        summary = ServiceStatsSummary(
            total_services=total,
            active_services=active,
            inactive_services=total - active,
            total_categories=row.total_categories or 0
        )

        service_count = func.count(Service.id).label("service_count")
        result = await self.db.execute(
            select(Service.category, service_count, func.avg(Service.price).label("avg_price"))
            .where(Service.is_active == True)
            .group_by(Service.category)
            .order_by(service_count.desc(), Service.category)
        )
        categories = [
            ServiceCategoryStats(
                category=r.category,
                service_count=r.service_count,
                avg_price=round(float(r.avg_price or 0), 2)
            )
            for r in result.all()
        ]
        return summary, categories

    async def sales_stats(self, today_start: datetime, today_end: datetime, top: int = 5) -> ServiceSalesStats:
        overall = (
            await self.db.execute(
                select(
                    func.count(ServiceSale.id).label("total_sales"),
                    func.coalesce(func.sum(ServiceSale.total_amount), 0).label("total_revenue"),
                    func.coalesce(func.sum(ServiceSale.quantity), 0).label("total_services_sold"),
                    func.count(func.distinct(ServiceSale.service_id)).label("unique_services_sold")
                )
            )
        ).first()
        today = (
            await self.db.execute(
                select(
                    func.count(ServiceSale.id).label("today_sales"),
                    func.coalesce(func.sum(ServiceSale.total_amount), 0).label("today_revenue")
                )
                .where(and_(ServiceSale.created_at >= today_start, ServiceSale.created_at < today_end))
            )
        ).first()

        revenue = func.coalesce(func.sum(ServiceSale.total_amount), 0).label("total_revenue")
        result = await self.db.execute(
            select(
                ServiceSale.service_id,
                Service.name,
                Service.category,
                func.count(ServiceSale.id).label("sale_count"),
                revenue
            )
            .outerjoin(Service, ServiceSale.service_id == Service.id)
            .group_by(ServiceSale.service_id, Service.name, Service.category)
            .order_by(revenue.desc())
            .limit(top)
        )

        return ServiceSalesStats(
            summary=ServiceSalesSummary(
                total_sales=overall.total_sales or 0,
                total_revenue=float(overall.total_revenue or 0),
                total_services_sold=int(overall.total_services_sold or 0),
                unique_services_sold=overall.unique_services_sold or 0,
                today_sales=today.today_sales or 0,
                today_revenue=float(today.today_revenue or 0)
            ),
            top_services=[
                TopService(
                    service_id=r.service_id,
                    service_name=r.name,
                    category=r.category,
                    sale_count=r.sale_count,
                    total_revenue=float(r.total_revenue or 0)
                )
                for r in result.all()
            ]
        )

    async def record_sale(self, service: Service, data: ServiceSaleCreate) -> ServiceSale:
        unit_price = Decimal(str(data.unit_price))
        sale = ServiceSale(
            service_id=service.id,
            quantity=data.quantity,
            unit_price=unit_price,
            total_amount=unit_price * data.quantity,
            served_by=data.served_by,
            notes=data.notes or ""
        )
        self.db.add(sale)
        await self.db.flush()
        return sale

    async def list_sales(self, page: int, page_size: int) -> Tuple[List[ServiceSaleResponse], int]:
        total = (await self.db.execute(select(func.count(ServiceSale.id)))).scalar() or 0
        result = await self.db.execute(
            select(ServiceSale, Service)
            .outerjoin(Service, ServiceSale.service_id == Service.id)
            .order_by(ServiceSale.created_at.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        return [to_service_sale_response(sale, service) for sale, service in result.all()], total

    async def sales_between(self, start: datetime, end: datetime) -> List[ServiceSaleResponse]:
        result = await self.db.execute(
            select(ServiceSale, Service)
            .outerjoin(Service, ServiceSale.service_id == Service.id)
            .where(and_(ServiceSale.created_at >= start, ServiceSale.created_at < end))
            .order_by(ServiceSale.created_at.desc())
        )
        return [to_service_sale_response(sale, service) for sale, service in result.all()]


class CustomerRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        return await self.db.get(Customer, customer_id)

    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        result = await self.db.execute(select(Customer).where(Customer.phone == phone))
        return result.scalar_one_or_none()

    async def list(self, page: int, page_size: int) -> Tuple[List[Customer], int]:
        total = (await self.db.execute(select(func.count(Customer.id)))).scalar() or 0
        result = await self.db.execute(
            select(Customer)
            .order_by(Customer.name)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        return list(result.scalars().all()), total

    async def create(self, data: CustomerCreate) -> Customer:
        customer = Customer(**data.model_dump())
        self.db.add(customer)
        await self.db.flush()
        return customer
