from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging

from pharmacy_pos.services.sync_service import SyncEngine

logger = logging.getLogger(__name__)

JOB_ID = "auto_sync"


class AutoSyncScheduler:
    """
    Periodically pushes local changes to the cloud.
    A failed tick is logged and simply retried on the next one.
    """

    def __init__(self, sync_engine: SyncEngine, interval_minutes: int = 15):
        self.sync_engine = sync_engine
        self.interval_minutes = interval_minutes
        self.scheduler = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    async def tick(self) -> bool:
        """
        One scheduled attempt. Never raises.
        """
        try:
            if self.sync_engine.is_syncing:
                logger.debug("Auto-sync skipped: sync already in progress")
                return False

            if not await self.sync_engine.probe.is_online():
                logger.debug("Auto-sync skipped: offline")
                return False

            logger.info("Auto-sync triggered")
            return await self.sync_engine.push_to_cloud()

        except Exception as e:
            logger.error(f"Error in auto-sync task: {str(e)}", exc_info=True)
            return False

    def start(self) -> bool:
        """
        Arm the interval job. Returns False if it was already running.
        """
        if self.running:
            logger.info("Auto-sync scheduler already running")
            return False

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.tick,
            IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            name="Push local changes to cloud",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Auto-sync scheduler started (every {self.interval_minutes} min)")
        return True

    def shutdown(self) -> None:
        if self.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Auto-sync scheduler stopped")
        self.scheduler = None
