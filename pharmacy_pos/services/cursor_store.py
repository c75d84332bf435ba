from sqlalchemy.ext.asyncio import async_sessionmaker
from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable
import logging

from pharmacy_pos.models import SyncState

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last_sync"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@runtime_checkable
class CursorStore(Protocol):
    """Durable holder of the last acknowledged sync timestamp"""

    async def load(self) -> Optional[datetime]:
        ...

    async def save(self, timestamp: datetime) -> None:
        ...


class InMemoryCursorStore:
    """Non-durable store for tests and throwaway runs"""

    def __init__(self, initial: Optional[datetime] = None):
        self.value = initial
        self.saves = 0

    async def load(self) -> Optional[datetime]:
        return self.value

    async def save(self, timestamp: datetime) -> None:
        self.value = timestamp
        self.saves += 1


class DatabaseCursorStore:
    """Keeps the cursor in the sync_state table of the local database"""

    def __init__(self, session_factory: async_sessionmaker, key: str = LAST_SYNC_KEY):
        self.session_factory = session_factory
        self.key = key

    async def load(self) -> Optional[datetime]:
        async with self.session_factory() as db:
            state = await db.get(SyncState, self.key)
            return as_utc(state.value) if state else None

    async def save(self, timestamp: datetime) -> None:
        async with self.session_factory() as db:
            async with db.begin():
                state = await db.get(SyncState, self.key)
                if state is None:
                    db.add(SyncState(key=self.key, value=timestamp))
                else:
                    state.value = timestamp
        logger.info(f"Sync cursor saved: {timestamp.isoformat()}")
