from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from decimal import Decimal
from typing import Optional
from pharmacy_pos.database import get_db
from pharmacy_pos.config import settings
from pharmacy_pos.core.exceptions import ProductNotFound, DuplicateRecord, ConflictError, ValidationError
from pharmacy_pos.repositories.product_repository import ProductRepository
from pharmacy_pos.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from pharmacy_pos.schemas.pagination import PaginatedResponse
import logging

router_products = APIRouter()
logger = logging.getLogger(__name__)


async def _get_or_404(repo: ProductRepository, product_id: str):
    product = await repo.get_by_id(product_id)
    if not product:
        raise ProductNotFound(product_id)
    return product


async def _ensure_barcode_free(repo: ProductRepository, barcode: Optional[str], product_id: Optional[str] = None):
    if not barcode:
        return
    existing = await repo.get_by_barcode(barcode)
    if existing and existing.id != product_id:
        raise DuplicateRecord("Product with this barcode already exists")


@router_products.get("/", response_model=PaginatedResponse[ProductResponse])
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """List products by name, optionally filtered by a search term or category"""
    products, total = await ProductRepository(db).list(page, page_size, search=search, category=category)
    return PaginatedResponse[ProductResponse].build(
        [ProductResponse.model_validate(p) for p in products], total, page, page_size
    )


@router_products.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product_data: ProductCreate, db: AsyncSession = Depends(get_db)):
    """Create new product"""
    repo = ProductRepository(db)
    await _ensure_barcode_free(repo, product_data.barcode)

    product = await repo.create(product_data)
    logger.info(f"Product {product.name} created with stock {product.stock}")
    return ProductResponse.model_validate(product)


@router_products.get("/barcode/{barcode}", response_model=ProductResponse)
async def get_product_by_barcode(barcode: str, db: AsyncSession = Depends(get_db)):
    """Get product by barcode"""
    product = await ProductRepository(db).get_by_barcode(barcode)
    if not product:
        raise ProductNotFound(barcode)
    return ProductResponse.model_validate(product)


@router_products.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await _get_or_404(ProductRepository(db), product_id)
    return ProductResponse.model_validate(product)


@router_products.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    patch: ProductUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Apply only the fields present in the request body"""
    repo = ProductRepository(db)
    product = await _get_or_404(repo, product_id)

    changes = patch.changes()
    if "barcode" in changes:
        await _ensure_barcode_free(repo, changes["barcode"], product_id=product.id)

    buy_price = changes.get("buy_price", product.buy_price)
    sell_price = changes.get("sell_price", product.sell_price)
    if Decimal(str(sell_price)) < Decimal(str(buy_price)):
        raise ValidationError("Sell price must be greater than or equal to buy price")

    product = await repo.apply_patch(product, patch)
    logger.info(f"Product {product.id} updated: {', '.join(changes) or 'no changes'}")
    return ProductResponse.model_validate(product)


@router_products.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, db: AsyncSession = Depends(get_db)):
    repo = ProductRepository(db)
    await _get_or_404(repo, product_id)
    if await repo.has_sales(product_id):
        raise ConflictError("Product has recorded sales and cannot be deleted")
    await repo.delete(product_id)
    logger.info(f"Product {product_id} deleted")
