"""Tests for sync cursor persistence."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pharmacy_pos.services.cursor_store import (
    CursorStore,
    DatabaseCursorStore,
    InMemoryCursorStore,
    as_utc,
)


async def test_database_store_starts_empty(session_factory):
    assert await DatabaseCursorStore(session_factory).load() is None


async def test_database_store_round_trip(session_factory):
    store = DatabaseCursorStore(session_factory)
    first = datetime(2026, 3, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)

    await store.save(first)
    await store.save(first + timedelta(minutes=15))

    # A fresh store sees the value a restart would see
    loaded = await DatabaseCursorStore(session_factory).load()
    assert loaded == first + timedelta(minutes=15)
    assert loaded.tzinfo is not None


async def test_stores_are_separated_by_key(session_factory):
    moment = datetime(2026, 3, 1, tzinfo=timezone.utc)
    await DatabaseCursorStore(session_factory, key="other").save(moment)

    assert await DatabaseCursorStore(session_factory).load() is None


async def test_in_memory_store_counts_saves():
    store = InMemoryCursorStore()
    moment = datetime(2026, 3, 1, tzinfo=timezone.utc)

    await store.save(moment)

    assert await store.load() == moment
    assert store.saves == 1


async def test_both_stores_satisfy_protocol(session_factory):
    assert isinstance(InMemoryCursorStore(), CursorStore)
    assert isinstance(DatabaseCursorStore(session_factory), CursorStore)


def test_as_utc_marks_naive_values():
    assert as_utc(datetime(2026, 1, 1)).tzinfo is timezone.utc
    assert as_utc(None) is None
