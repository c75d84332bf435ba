"""Tests for the cloud sync engine."""
from __future__ import annotations

import asyncio
import json

import httpx

from pharmacy_pos.models import utcnow
from pharmacy_pos.schemas.sale import SaleItemCreate
from pharmacy_pos.services.change_extractor import ChangeExtractor
from pharmacy_pos.services.cursor_store import InMemoryCursorStore
from pharmacy_pos.services.sync_service import SyncEngine

from conftest import CloudStub, FakeProbe


async def record_sale(sale_engine, make_product):
    product = await make_product(stock=5)
    return await sale_engine.submit_sale(
        [SaleItemCreate(product_id=product.id, quantity=2, unit_sell_price=10)], "cash"
    )


def build_engine(session_factory, transport, probe=None, cursor_store=None):
    return SyncEngine(
        extractor=ChangeExtractor(session_factory),
        cursor_store=cursor_store or InMemoryCursorStore(),
        probe=probe or FakeProbe(online=True),
        api_url="https://cloud.example.com/api",
        pharmacy_id="pharmacy_main",
        api_key="test-key",
        push_timeout=5,
        transport=transport,
    )


class TestPushToCloud:

    async def test_offline_defers_without_touching_cursor(
        self, sync_engine, probe, cloud, cursor_store, sale_engine, make_product
    ):
        await record_sale(sale_engine, make_product)
        probe.online = False

        assert await sync_engine.push_to_cloud() is False

        assert cloud.requests == []
        assert cursor_store.saves == 0
        assert sync_engine.last_sync is None
        assert sync_engine.is_syncing is False

    async def test_nothing_pending_skips_network(self, sync_engine, cloud, cursor_store):
        assert await sync_engine.push_to_cloud() is True

        assert cloud.requests == []
        assert cursor_store.saves == 0
        assert sync_engine.progress == 100
        assert sync_engine.error is None

    async def test_successful_push_advances_cursor(
        self, sync_engine, cloud, cursor_store, sale_engine, make_product
    ):
        receipt = await record_sale(sale_engine, make_product)
        before = utcnow()

        assert await sync_engine.push_to_cloud() is True

        assert len(cloud.requests) == 1
        request = cloud.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://cloud.example.com/api/sync/push"
        assert request.headers["x-api-key"] == "test-key"
        body = json.loads(request.content)
        assert body["pharmacy_id"] == "pharmacy_main"
        assert body["total_records"] == 3
        assert [s["id"] for s in body["data"]["sales"]] == [receipt.id]

        assert cursor_store.saves == 1
        assert cursor_store.value >= before
        assert sync_engine.last_sync == cursor_store.value
        assert sync_engine.progress == 100
        assert sync_engine.is_syncing is False

    async def test_second_push_sends_nothing_new(self, sync_engine, cloud, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        assert await sync_engine.push_to_cloud() is True

        assert await sync_engine.push_to_cloud() is True

        assert len(cloud.requests) == 1

    async def test_http_error_keeps_cursor(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        cloud = CloudStub(status_code=500, body={"message": "boom"})
        store = InMemoryCursorStore()
        engine = build_engine(session_factory, cloud.transport, cursor_store=store)

        assert await engine.push_to_cloud() is False

        assert engine.error.startswith("HTTP 500")
        assert store.saves == 0
        assert engine.last_sync is None
        assert engine.is_syncing is False

    async def test_rejected_push_records_cloud_error(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        cloud = CloudStub(body={"success": False, "error": "Unknown pharmacy"})
        store = InMemoryCursorStore()
        engine = build_engine(session_factory, cloud.transport, cursor_store=store)

        assert await engine.push_to_cloud() is False

        assert engine.error == "Unknown pharmacy"
        assert store.saves == 0

    async def test_network_failure_is_reported(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        engine = build_engine(session_factory, httpx.MockTransport(refuse))

        assert await engine.push_to_cloud() is False

        assert "connection refused" in engine.error
        assert engine.is_syncing is False

    async def test_failed_window_is_resent(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        failing = CloudStub(status_code=503)
        store = InMemoryCursorStore()
        assert await build_engine(session_factory, failing.transport, cursor_store=store).push_to_cloud() is False

        healthy = CloudStub()
        engine = build_engine(session_factory, healthy.transport, cursor_store=store)

        assert await engine.push_to_cloud() is True
        assert json.loads(healthy.requests[0].content)["total_records"] == 3

    async def test_cursor_is_loaded_from_store(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        cloud = CloudStub()
        store = InMemoryCursorStore(initial=utcnow())
        engine = build_engine(session_factory, cloud.transport, cursor_store=store)

        assert await engine.push_to_cloud() is True

        assert cloud.requests == []
        assert engine.last_sync == store.value


class TestSingleFlight:

    async def test_concurrent_push_is_refused(self, session_factory, sale_engine, make_product):
        await record_sale(sale_engine, make_product)
        release = asyncio.Event()
        requests = []

        async def slow_cloud(request):
            requests.append(request)
            await release.wait()
            return httpx.Response(200, json={"success": True})

        engine = build_engine(session_factory, httpx.MockTransport(slow_cloud))
        first = asyncio.create_task(engine.push_to_cloud())
        while not requests:
            await asyncio.sleep(0.01)

        assert engine.is_syncing is True
        assert engine.get_status().is_syncing is True
        assert await engine.push_to_cloud() is False

        release.set()
        assert await first is True
        assert len(requests) == 1
        assert engine.is_syncing is False


async def test_status_uses_camel_case_names(sync_engine):
    sync_engine.progress = 40
    sync_engine.error = "HTTP 502: Bad Gateway"

    status = sync_engine.get_status().model_dump(by_alias=True)

    assert status == {
        "lastSync": None,
        "isSyncing": False,
        "progress": 40,
        "error": "HTTP 502: Bad Gateway",
    }
