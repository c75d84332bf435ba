from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, and_, or_
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from pharmacy_pos.models import Sale, SaleItem, Product, Service, ServiceSale, Customer, SaleStatus
from pharmacy_pos.schemas.sync import SyncData

logger = logging.getLogger(__name__)

# Cursor used when nothing has ever been synced
EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)


def row_to_dict(row) -> Dict[str, Any]:
    """Column values of an ORM row, with money as plain numbers"""
    data = {}
    for column in row.__table__.columns:
        value = getattr(row, column.key)
        if isinstance(value, Decimal):
            value = float(value)
        data[column.key] = value
    return data


class ChangeExtractor:
    """Reads every row created or updated after a cursor. Read-only."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _fetch(self, db: AsyncSession, query) -> List[Dict[str, Any]]:
        result = await db.execute(query)
        return [row_to_dict(row) for row in result.scalars().all()]

    async def extract_changes(self, cursor: Optional[datetime]) -> SyncData:
        since = cursor or EPOCH
        logger.info(f"Fetching data changes since: {since.isoformat()}")

        async with self.session_factory() as db:
            new_sales = and_(Sale.created_at > since, Sale.status == SaleStatus.COMPLETED.value)

            sales = await self._fetch(
                db,
                select(Sale).where(new_sales).order_by(Sale.created_at.asc(), Sale.id)
            )

            sale_items = []
            if sales:
                sale_items = await self._fetch(
                    db,
                    select(SaleItem)
                    .where(SaleItem.sale_id.in_(select(Sale.id).where(new_sales)))
                    .order_by(SaleItem.created_at.asc(), SaleItem.id)
                )

            services = await self._fetch(
                db,
                select(Service)
                .where(or_(Service.created_at > since, Service.updated_at > since))
                .order_by(Service.created_at.asc(), Service.id)
            )

            service_sales = await self._fetch(
                db,
                select(ServiceSale)
                .where(ServiceSale.created_at > since)
                .order_by(ServiceSale.created_at.asc(), ServiceSale.id)
            )

            products = await self._fetch(
                db,
                select(Product)
                .where(or_(Product.created_at > since, Product.updated_at > since))
                .order_by(Product.created_at.asc(), Product.id)
            )

            customers = await self._fetch(
                db,
                select(Customer)
                .where(Customer.created_at > since)
                .order_by(Customer.created_at.asc(), Customer.id)
            )

        return SyncData(
            sales=sales,
            sale_items=sale_items,
            services=services,
            service_sales=service_sales,
            products=products,
            customers=customers,
            last_sync=cursor
        )
