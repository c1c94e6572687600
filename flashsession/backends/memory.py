"""In-process session backend."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .base import DefaultIdentity


class MemoryBackend(DefaultIdentity):
    """In-memory session backend for development/testing.

    Not suitable for production: sessions are lost on restart and not
    shared across processes. Records are copied in and out so callers never
    hold a reference into the store.

    Each entry keeps the lifetime it was saved with. Expired entries are
    dropped when read, and a save evicts every expired entry, so ids that are
    never read again (abandoned or regenerated sessions) do not pile up.
    """

    def __init__(self, id_attempts: int = MAX_ID_ATTEMPTS) -> None:
        self._store: dict[str, tuple[SessionRecord, int]] = {}
        self.id_attempts = id_attempts

    async def load(self, key: str) -> SessionRecord | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        record, max_age = entry
        if _expired(record, max_age, time.time()):
            del self._store[key]
            return None
        return record.model_copy(deep=True)

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        self._evict(time.time())
        max_age = int(config.get("lifetime", 0)) * 60
        self._store[record.id] = (record.model_copy(deep=True), max_age)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def _evict(self, now: float) -> None:
        stale = [key for key, (record, max_age) in self._store.items() if _expired(record, max_age, now)]
        for key in stale:
            del self._store[key]


def _expired(record: SessionRecord, max_age: int, now: float) -> bool:
    if record.last_activity is None:
        return False
    return now - record.last_activity > max_age
