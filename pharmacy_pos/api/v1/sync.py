from fastapi import APIRouter, Depends
from pharmacy_pos.api.deps import get_sync_engine, get_auto_sync
from pharmacy_pos.schemas.sync import SyncStatus, SyncTriggerResponse
from pharmacy_pos.services.sync_service import SyncEngine
from pharmacy_pos.tasks.auto_sync import AutoSyncScheduler

router = APIRouter()


@router.get("/status", response_model=SyncStatus)
async def get_sync_status(sync_engine: SyncEngine = Depends(get_sync_engine)):
    return sync_engine.get_status()


@router.post("/manual", response_model=SyncTriggerResponse)
async def trigger_manual_sync(sync_engine: SyncEngine = Depends(get_sync_engine)):
    """Run one push now and report the resulting status"""
    success = await sync_engine.manual_sync()
    return SyncTriggerResponse(success=success, data=sync_engine.get_status())


@router.post("/start", response_model=SyncTriggerResponse)
async def start_auto_sync(
    sync_engine: SyncEngine = Depends(get_sync_engine),
    auto_sync: AutoSyncScheduler = Depends(get_auto_sync)
):
    started = auto_sync.start()
    return SyncTriggerResponse(
        success=True,
        data=sync_engine.get_status(),
        message="Auto sync started" if started else "Auto sync already running"
    )


@router.post("/stop", response_model=SyncTriggerResponse)
async def stop_auto_sync(
    sync_engine: SyncEngine = Depends(get_sync_engine),
    auto_sync: AutoSyncScheduler = Depends(get_auto_sync)
):
    auto_sync.shutdown()
    return SyncTriggerResponse(success=True, data=sync_engine.get_status(), message="Auto sync stopped")
