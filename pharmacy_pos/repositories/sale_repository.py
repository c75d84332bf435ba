from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging

from pharmacy_pos.models import Sale, SaleItem, Product, SaleStatus
from pharmacy_pos.schemas.sale import SaleResponse, SaleItemResponse, SalesSummary

logger = logging.getLogger(__name__)


def to_item_response(item: SaleItem, product_name: Optional[str] = None) -> SaleItemResponse:
    return SaleItemResponse(
        id=item.id,
        sale_id=item.sale_id,
        product_id=item.product_id,
        product_name=product_name,
        quantity=item.quantity,
        unit_sell_price=float(item.unit_sell_price),
        unit_buy_price=float(item.unit_buy_price),
        total_sell_price=float(item.total_sell_price),
        item_profit=float(item.item_profit),
        created_at=item.created_at
    )


def to_sale_response(sale: Sale, items: List[SaleItemResponse]) -> SaleResponse:
    return SaleResponse(
        id=sale.id,
        total_amount=float(sale.total_amount),
        total_profit=float(sale.total_profit),
        payment_method=sale.payment_method,
        status=sale.status,
        created_at=sale.created_at,
        items=items
    )


class SaleRepository:
    """Storage access for sales and their line items"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, payment_method: str) -> Sale:
        """Insert the sale header with zero totals; items reference it"""
        sale = Sale(
            total_amount=Decimal("0.00"),
            total_profit=Decimal("0.00"),
            payment_method=payment_method,
            status=SaleStatus.COMPLETED.value
        )
        self.db.add(sale)
        await self.db.flush()
        return sale

    async def insert_item(
        self,
        sale: Sale,
        product_id: str,
        quantity: int,
        unit_sell_price: Decimal,
        unit_buy_price: Decimal,
        total_sell_price: Decimal,
        item_profit: Decimal
    ) -> SaleItem:
        item = SaleItem(
            sale_id=sale.id,
            product_id=product_id,
            quantity=quantity,
            unit_sell_price=unit_sell_price,
            unit_buy_price=unit_buy_price,
            total_sell_price=total_sell_price,
            item_profit=item_profit
        )
        self.db.add(item)
        await self.db.flush()
        return item

    async def update_totals(self, sale: Sale, total_amount: Decimal, total_profit: Decimal) -> Sale:
        sale.total_amount = total_amount
        sale.total_profit = total_profit
        await self.db.flush()
        return sale

    async def _load_items(self, sale_ids: List[str]) -> Dict[str, List[SaleItemResponse]]:
        """Join items with product names and group them per sale"""
        grouped: Dict[str, List[SaleItemResponse]] = {sale_id: [] for sale_id in sale_ids}
        if not sale_ids:
            return grouped

        result = await self.db.execute(
            select(SaleItem, Product.name)
            .outerjoin(Product, SaleItem.product_id == Product.id)
            .where(SaleItem.sale_id.in_(sale_ids))
            .order_by(SaleItem.created_at.asc(), SaleItem.id)
        )
        for item, product_name in result.all():
            grouped[item.sale_id].append(to_item_response(item, product_name))
        return grouped

    async def get_with_items(self, sale_id: str) -> Optional[SaleResponse]:
        sale = await self.db.get(Sale, sale_id)
        if sale is None:
            return None
        items = await self._load_items([sale.id])
        return to_sale_response(sale, items[sale.id])

    async def list_with_items(self, page: int, page_size: int) -> Tuple[List[SaleResponse], int]:
        total = (await self.db.execute(select(func.count(Sale.id)))).scalar() or 0
        result = await self.db.execute(
            select(Sale)
            .order_by(Sale.created_at.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        sales = result.scalars().all()
        items = await self._load_items([s.id for s in sales])
        return [to_sale_response(s, items[s.id]) for s in sales], total

    async def list_between(self, start: datetime, end: datetime) -> List[SaleResponse]:
        result = await self.db.execute(
            select(Sale)
            .where(and_(Sale.created_at >= start, Sale.created_at < end))
            .order_by(Sale.created_at.desc())
        )
        sales = result.scalars().all()
        items = await self._load_items([s.id for s in sales])
        return [to_sale_response(s, items[s.id]) for s in sales]

    async def summary_between(self, start: datetime, end: datetime) -> SalesSummary:
        row = (
            await self.db.execute(
                select(
                    func.count(Sale.id).label("total_sales"),
                    func.coalesce(func.sum(Sale.total_amount), 0).label("total_amount"),
                    func.coalesce(func.sum(Sale.total_profit), 0).label("total_profit")
                )
                .where(and_(Sale.created_at >= start, Sale.created_at < end))
            )
        ).first()
        return SalesSummary(
            total_sales=row.total_sales or 0,
            total_amount=float(row.total_amount or 0),
            total_profit=float(row.total_profit or 0)
        )

    async def items_sold_between(self, start: datetime, end: datetime) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.sum(SaleItem.quantity), 0))
            .join(Sale, SaleItem.sale_id == Sale.id)
            .where(and_(Sale.created_at >= start, Sale.created_at < end))
        )
        return int(result.scalar() or 0)

    async def recent(self, limit: int = 10) -> List[Tuple[Sale, int]]:
        """Latest sales with their line-item count"""
        items_count = (
            select(func.count(SaleItem.id))
            .where(SaleItem.sale_id == Sale.id)
            .correlate(Sale)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Sale, items_count.label("items_count"))
            .order_by(Sale.created_at.desc())
            .limit(limit)
        )
        return [(sale, count) for sale, count in result.all()]

    async def daily_totals(self, start: datetime, end: datetime) -> Dict[str, Tuple[float, float, int]]:
        """(revenue, profit, orders) keyed by ISO day, only for days with sales"""
        day = func.date(Sale.created_at).label("day")
        result = await self.db.execute(
            select(
                day,
                func.coalesce(func.sum(Sale.total_amount), 0).label("revenue"),
                func.coalesce(func.sum(Sale.total_profit), 0).label("profit"),
                func.count(Sale.id).label("orders")
            )
            .where(and_(Sale.created_at >= start, Sale.created_at < end))
            .group_by(day)
        )
        return {
            str(row.day)[:10]: (float(row.revenue or 0), float(row.profit or 0), row.orders or 0)
            for row in result.all()
        }
