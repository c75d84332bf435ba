from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_, or_
from typing import List, Optional, Tuple
import logging

from pharmacy_pos.models import Product, SaleItem, utcnow
from pharmacy_pos.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductRepository:
    """Storage access for products, bound to one session / unit of work"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, product_id: str, refresh: bool = False) -> Optional[Product]:
        """
        Fetch a product by id.
        refresh=True bypasses the session identity map so prices and stock
        are read from the store as of now.
        """
        return await self.db.get(Product, product_id, populate_existing=refresh)

    async def get_by_barcode(self, barcode: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(Product.barcode == barcode)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        page: int,
        page_size: int,
        search: Optional[str] = None,
        category: Optional[str] = None
    ) -> Tuple[List[Product], int]:
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern),
                    Product.category.ilike(pattern),
                    Product.barcode.ilike(pattern)
                )
            )
        if category:
            conditions.append(Product.category == category)

        query = select(Product).order_by(Product.name)
        count_query = select(func.count(Product.id))
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        total = (await self.db.execute(count_query)).scalar() or 0
        result = await self.db.execute(
            query.limit(page_size).offset((page - 1) * page_size)
        )
        return list(result.scalars().all()), total

    async def create(self, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        self.db.add(product)
        await self.db.flush()
        return product

    async def apply_patch(self, product: Product, patch: ProductUpdate) -> Product:
        changes = patch.changes()
        for field, value in changes.items():
            setattr(product, field, value)
        if changes:
            product.updated_at = utcnow()
            await self.db.flush()
        return product

    async def has_sales(self, product_id: str) -> bool:
        result = await self.db.execute(
            select(SaleItem.id).where(SaleItem.product_id == product_id).limit(1)
        )
        return result.first() is not None

    async def delete(self, product_id: str) -> None:
        await self.db.execute(
            delete(Product)
            .where(Product.id == product_id)
            .execution_options(synchronize_session=False)
        )

    async def decrement_stock_if_available(self, product_id: str, quantity: int) -> bool:
        """
        Atomically take `quantity` units out of stock.
        Returns False, changing nothing, when fewer than `quantity` units remain.
        """
        result = await self.db.execute(
            update(Product)
            .where(
                and_(
                    Product.id == product_id,
                    Product.stock >= quantity
                )
            )
            .values(stock=Product.stock - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def low_stock(self, threshold: int, limit: int = 10) -> List[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.stock <= threshold)
            .order_by(Product.stock.asc(), Product.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def counts(self, low_stock_threshold: int) -> Tuple[int, int, int]:
        """(total products, distinct categories, products at or under the threshold)"""
        row = (
            await self.db.execute(
                select(
                    func.count(Product.id).label("total_products"),
                    func.count(func.distinct(Product.category)).label("total_categories")
                )
            )
        ).first()
        low_stock = (
            await self.db.execute(
                select(func.count(Product.id)).where(Product.stock <= low_stock_threshold)
            )
        ).scalar() or 0
        return row.total_products or 0, row.total_categories or 0, low_stock

    async def category_distribution(self) -> List[Tuple[str, int, float]]:
        """(category, product count, revenue from sold items), highest revenue first"""
        counts = await self.db.execute(
            select(Product.category, func.count(Product.id))
            .group_by(Product.category)
        )
        revenue = await self.db.execute(
            select(Product.category, func.coalesce(func.sum(SaleItem.total_sell_price), 0))
            .join(SaleItem, SaleItem.product_id == Product.id)
            .group_by(Product.category)
        )
        revenue_by_category = {category: float(total) for category, total in revenue.all()}

        rows = [
            (category, count, revenue_by_category.get(category, 0.0))
            for category, count in counts.all()
        ]
        return sorted(rows, key=lambda row: (-row[2], row[0]))
