"""Tests for change extraction."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from sqlalchemy import update

from pharmacy_pos.models import Product, Sale, SaleStatus, utcnow
from pharmacy_pos.schemas.sale import SaleItemCreate
from pharmacy_pos.services.change_extractor import ChangeExtractor


async def test_first_sync_returns_everything(
    session_factory, sale_engine, make_product, make_service, make_service_sale, make_customer
):
    product = await make_product(stock=5)
    service = await make_service()
    await make_service_sale(service, quantity=2)
    await make_customer()
    await sale_engine.submit_sale(
        [SaleItemCreate(product_id=product.id, quantity=1, unit_sell_price=10)], "cash"
    )

    data = await ChangeExtractor(session_factory).extract_changes(None)

    assert len(data.sales) == 1
    assert len(data.sale_items) == 1
    assert len(data.products) == 1
    assert len(data.services) == 1
    assert len(data.service_sales) == 1
    assert len(data.customers) == 1
    assert data.total_records == 6
    assert data.last_sync is None
    assert data.sale_items[0]["sale_id"] == data.sales[0]["id"]
    assert data.sales[0]["total_amount"] == 10.0


async def test_cursor_after_all_rows_is_empty_and_idempotent(session_factory, make_product, make_customer):
    await make_product()
    await make_customer()
    cursor = utcnow() + timedelta(seconds=1)
    extractor = ChangeExtractor(session_factory)

    first = await extractor.extract_changes(cursor)
    second = await extractor.extract_changes(cursor)

    assert first.total_records == 0
    assert second.total_records == 0
    assert first.last_sync == cursor


async def test_rows_are_ordered_oldest_first(session_factory, make_customer):
    for i in range(3):
        await make_customer(name=f"Customer {i}", phone=f"0803000000{i}")

    data = await ChangeExtractor(session_factory).extract_changes(None)

    assert [c["name"] for c in data.customers] == ["Customer 0", "Customer 1", "Customer 2"]


async def test_refunded_sales_are_not_sent(session_factory):
    async with session_factory() as db:
        async with db.begin():
            db.add(Sale(
                total_amount=Decimal("12.00"),
                total_profit=Decimal("2.00"),
                payment_method="card",
                status=SaleStatus.REFUNDED.value
            ))

    data = await ChangeExtractor(session_factory).extract_changes(None)

    assert data.sales == []
    assert data.sale_items == []


async def test_products_updated_after_cursor_are_included(session_factory, make_product):
    old = await make_product(name="Old stock")
    untouched = await make_product(name="Untouched")
    cursor = utcnow()

    async with session_factory() as db:
        async with db.begin():
            await db.execute(
                update(Product)
                .where(Product.id == old.id)
                .values(stock=99, updated_at=cursor + timedelta(seconds=1))
            )

    data = await ChangeExtractor(session_factory).extract_changes(cursor)

    ids = [p["id"] for p in data.products]
    assert ids == [old.id]
    assert untouched.id not in ids
    assert data.products[0]["stock"] == 99
