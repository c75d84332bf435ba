from datetime import datetime
from enum import Enum
from typing import Optional
import threading
import httpx
import logging

from pharmacy_pos.models import utcnow
from pharmacy_pos.schemas.sync import SyncAck, SyncData, SyncPushRequest, SyncStatus
from pharmacy_pos.services.change_extractor import ChangeExtractor
from pharmacy_pos.services.connectivity import ConnectivityProbe
from pharmacy_pos.services.cursor_store import CursorStore, DatabaseCursorStore
from pharmacy_pos.core.exceptions import SyncError, TransportError, RemoteRejection

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


class SyncEngine:
    """
    Pushes rows changed since the last acknowledged sync to the cloud endpoint.

    Protocol: connectivity gate -> single-flight guard -> extract -> push ->
    advance cursor on acknowledgment. Failures are recorded in the status and
    the same window is resent on the next attempt (at-least-once delivery).
    """

    def __init__(
        self,
        extractor: ChangeExtractor,
        cursor_store: CursorStore,
        probe: ConnectivityProbe,
        api_url: str,
        pharmacy_id: str,
        api_key: Optional[str] = None,
        push_timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.extractor = extractor
        self.cursor_store = cursor_store
        self.probe = probe
        self.api_url = api_url.rstrip("/")
        self.pharmacy_id = pharmacy_id
        self.api_key = api_key
        self.push_timeout = push_timeout
        self.transport = transport

        self.last_sync: Optional[datetime] = None
        self.progress = 0
        self.error: Optional[str] = None

        self._cursor_loaded = False
        self._phase = SyncPhase.IDLE
        self._phase_lock = threading.Lock()

    def _transition(self, expected: SyncPhase, new: SyncPhase) -> bool:
        """Compare-and-set on the sync phase"""
        with self._phase_lock:
            if self._phase is not expected:
                return False
            self._phase = new
            return True

    @property
    def is_syncing(self) -> bool:
        return self._phase is SyncPhase.SYNCING

    async def load_cursor(self) -> Optional[datetime]:
        self.last_sync = await self.cursor_store.load()
        self._cursor_loaded = True
        if self.last_sync:
            logger.info(f"Last sync loaded: {self.last_sync.isoformat()}")
        return self.last_sync

    def get_status(self) -> SyncStatus:
        return SyncStatus(
            last_sync=self.last_sync,
            is_syncing=self.is_syncing,
            progress=self.progress,
            error=self.error
        )

    async def _post(self, data: SyncData) -> httpx.Response:
        body = SyncPushRequest(
            pharmacy_id=self.pharmacy_id,
            data=data,
            total_records=data.total_records
        ).model_dump(mode="json")

        headers = {}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.push_timeout, transport=self.transport) as client:
                response = await client.post(f"{self.api_url}/sync/push", json=body, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Push to {self.api_url} failed: {str(e) or type(e).__name__}") from e

        if not response.is_success:
            raise TransportError(f"HTTP {response.status_code}: {response.reason_phrase}")
        return response

    @staticmethod
    def _acknowledge(response: httpx.Response) -> SyncAck:
        try:
            ack = SyncAck.model_validate(response.json())
        except ValueError as e:
            raise TransportError(f"Invalid acknowledgment from cloud: {str(e)}") from e

        if not ack.success:
            raise RemoteRejection(ack.error or "Sync failed")
        return ack

    async def push_to_cloud(self) -> bool:
        """
        Returns True when the changes were delivered or there was nothing to
        send, False when the push was deferred (offline, already running) or
        failed.
        """
        if not await self.probe.is_online():
            logger.info("Offline - sync deferred until connectivity returns")
            return False

        if not self._transition(SyncPhase.IDLE, SyncPhase.SYNCING):
            logger.info("Sync already in progress")
            return False

        try:
            self.error = None
            self.progress = 10
            logger.info("Starting data sync to cloud...")

            if not self._cursor_loaded:
                await self.load_cursor()

            data = await self.extractor.extract_changes(self.last_sync)
            self.progress = 30

            total_records = data.total_records
            if total_records == 0:
                logger.info("No new data to sync")
                self.progress = 100
                return True

            logger.info(f"Syncing {total_records} records to cloud...")
            response = await self._post(data)
            self.progress = 70

            ack = self._acknowledge(response)
            self.progress = 90

            # Cursor moves to completion time, not to the newest row sent
            synced_at = utcnow()
            await self.cursor_store.save(synced_at)
            self.last_sync = synced_at
            self.progress = 100

            logger.info(f"Sync completed successfully: {ack.summary}")
            return True

        except SyncError as e:
            self.error = e.message
            logger.error(f"Sync error: {e.message}")
            return False

        except Exception as e:
            self.error = str(e) or type(e).__name__
            logger.error(f"Unexpected sync error: {str(e)}", exc_info=True)
            return False

        finally:
            self._transition(SyncPhase.SYNCING, SyncPhase.IDLE)

    async def manual_sync(self) -> bool:
        logger.info("Manual sync triggered")
        return await self.push_to_cloud()


def create_sync_engine(session_factory, settings) -> SyncEngine:
    """Wire a sync engine from application settings"""
    return SyncEngine(
        extractor=ChangeExtractor(session_factory),
        cursor_store=DatabaseCursorStore(session_factory),
        probe=ConnectivityProbe(
            settings.CONNECTIVITY_CHECK_URL,
            timeout=settings.CONNECTIVITY_TIMEOUT_SECONDS
        ),
        api_url=settings.CLOUD_API_URL,
        pharmacy_id=settings.PHARMACY_ID,
        api_key=settings.CLOUD_API_KEY,
        push_timeout=settings.SYNC_PUSH_TIMEOUT_SECONDS
    )
