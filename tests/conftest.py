from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from moodpad.storage import MemoryKeyValueStore
from moodpad.store import EntryStore

FIXED_NOW = datetime(2024, 12, 8, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(kv) -> EntryStore:
    return EntryStore(kv, clock=lambda: FIXED_NOW)


@pytest.fixture()
def today() -> date:
    return date(2024, 12, 8)
