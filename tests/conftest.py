"""Shared pytest fixtures."""
from __future__ import annotations

import os

os.environ.setdefault("LOG_FILE", os.devnull)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./pharmacy_pos_test.db")

from decimal import Decimal
from typing import Optional

import httpx
import pytest
from sqlalchemy import select, func

from pharmacy_pos.database import build_engine, build_session_factory, create_tables
from pharmacy_pos.models import Product, Service, Customer, ServiceSale
from pharmacy_pos.services.change_extractor import ChangeExtractor
from pharmacy_pos.services.cursor_store import InMemoryCursorStore
from pharmacy_pos.services.sale_service import SaleTransactionEngine
from pharmacy_pos.services.sync_service import SyncEngine


class FakeProbe:
    """Connectivity probe with a switchable answer."""

    def __init__(self, online: bool = True):
        self.online = online
        self.calls = 0

    async def is_online(self) -> bool:
        self.calls += 1
        return self.online


class CloudStub:
    """Records pushes and answers with a configurable response."""

    def __init__(self, status_code: int = 200, body: Optional[dict] = None):
        self.status_code = status_code
        self.body = body if body is not None else {"success": True, "summary": {"received": True}}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'pos.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def sale_engine(session_factory) -> SaleTransactionEngine:
    return SaleTransactionEngine(session_factory)


@pytest.fixture
def make_product(session_factory):
    async def _make(
        name: str = "Paracetamol 500mg",
        buy_price: float = 5,
        sell_price: float = 10,
        stock: int = 10,
        category: str = "Analgesics",
        barcode: Optional[str] = None,
    ) -> Product:
        async with session_factory() as db:
            async with db.begin():
                product = Product(
                    name=name,
                    buy_price=Decimal(str(buy_price)),
                    sell_price=Decimal(str(sell_price)),
                    stock=stock,
                    category=category,
                    barcode=barcode,
                )
                db.add(product)
        return product

    return _make


@pytest.fixture
def make_service(session_factory):
    async def _make(
        name: str = "Blood pressure check",
        price: float = 15,
        is_active: bool = True,
        category: str = "Screening",
    ) -> Service:
        async with session_factory() as db:
            async with db.begin():
                service = Service(
                    name=name,
                    category=category,
                    price=Decimal(str(price)),
                    duration=10,
                    is_active=is_active,
                )
                db.add(service)
        return service

    return _make


@pytest.fixture
def make_customer(session_factory):
    async def _make(name: str = "Ada Obi", phone: str = "08030000001") -> Customer:
        async with session_factory() as db:
            async with db.begin():
                customer = Customer(name=name, phone=phone)
                db.add(customer)
        return customer

    return _make


@pytest.fixture
def make_service_sale(session_factory):
    async def _make(service: Service, quantity: int = 1) -> ServiceSale:
        async with session_factory() as db:
            async with db.begin():
                sale = ServiceSale(
                    service_id=service.id,
                    quantity=quantity,
                    unit_price=service.price,
                    total_amount=service.price * quantity,
                    served_by="pharmacist",
                )
                db.add(sale)
        return sale

    return _make


@pytest.fixture
def stock_of(session_factory):
    async def _stock(product_id: str) -> int:
        async with session_factory() as db:
            product = await db.get(Product, product_id)
            return product.stock

    return _stock


@pytest.fixture
def count_rows(session_factory):
    async def _count(model) -> int:
        async with session_factory() as db:
            return (await db.execute(select(func.count()).select_from(model))).scalar()

    return _count


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe(online=True)


@pytest.fixture
def cloud() -> CloudStub:
    return CloudStub()


@pytest.fixture
def cursor_store() -> InMemoryCursorStore:
    return InMemoryCursorStore()


@pytest.fixture
def sync_engine(session_factory, probe, cloud, cursor_store) -> SyncEngine:
    return SyncEngine(
        extractor=ChangeExtractor(session_factory),
        cursor_store=cursor_store,
        probe=probe,
        api_url="https://cloud.example.com/api/",
        pharmacy_id="pharmacy_main",
        api_key="test-key",
        push_timeout=5,
        transport=cloud.transport,
    )
