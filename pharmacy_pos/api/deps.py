from fastapi import Request

from pharmacy_pos.database import AsyncSessionLocal
from pharmacy_pos.services.sale_service import SaleTransactionEngine
from pharmacy_pos.services.sync_service import SyncEngine
from pharmacy_pos.tasks.auto_sync import AutoSyncScheduler


def get_sale_engine() -> SaleTransactionEngine:
    return SaleTransactionEngine(AsyncSessionLocal)


def get_sync_engine(request: Request) -> SyncEngine:
    return request.app.state.sync_engine


def get_auto_sync(request: Request) -> AutoSyncScheduler:
    return request.app.state.auto_sync
