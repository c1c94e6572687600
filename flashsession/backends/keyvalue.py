"""Generic key-value session backend.

Adapts any store offering ``get``/``put``/``forget`` with per-key expiry.
Records expire inside the store itself, so the adapter has no sweep.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .base import DefaultIdentity

KEY_PREFIX = "session:"


@runtime_checkable
class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | bytes | None:
        ...

    async def put(self, key: str, value: str, seconds: int) -> None:
        """Store ``value``; ``seconds == 0`` means no expiry."""
        ...

    async def forget(self, key: str) -> None:
        ...


class KeyValueBackend(DefaultIdentity):
    def __init__(
        self,
        store: KeyValueStore,
        prefix: str = KEY_PREFIX,
        id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self.store = store
        self.prefix = prefix
        self.id_attempts = id_attempts

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def load(self, key: str) -> SessionRecord | None:
        return SessionRecord.loads(await self.store.get(self._key(key)))

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        seconds = int(config.get("lifetime", 0)) * 60
        await self.store.put(self._key(record.id), record.dumps(), seconds)

    async def delete(self, key: str) -> None:
        await self.store.forget(self._key(key))
