"""Memcached session backend on ``aiomcache``.

Memcached cannot enumerate its keys, so there is no sweep: records are
dropped by the server when their expiry passes.
"""

from __future__ import annotations

import logging
import time

import aiomcache
from aiomcache.exceptions import ClientException

from ..errors import BackendError
from ..ids import MAX_ID_ATTEMPTS
from .keyvalue import KEY_PREFIX, KeyValueBackend

logger = logging.getLogger(__name__)

# Larger expiry values are read by memcached as absolute UNIX timestamps
_MAX_RELATIVE_EXPIRY = 30 * 24 * 3600


class MemcachedStore:
    """``KeyValueStore`` over an ``aiomcache.Client``."""

    def __init__(self, client: aiomcache.Client) -> None:
        self.client = client

    async def get(self, key: str) -> bytes | None:
        try:
            raw = await self.client.get(key.encode())
        except (ClientException, OSError) as e:
            logger.error("Memcached error during session read for %s: %s", key, e)
            raise BackendError("Memcached error during session read") from e
        return raw

    async def put(self, key: str, value: str, seconds: int) -> None:
        if seconds > _MAX_RELATIVE_EXPIRY:
            seconds = int(time.time()) + seconds
        try:
            await self.client.set(key.encode(), value.encode(), exptime=seconds)
        except (ClientException, OSError) as e:
            logger.error("Memcached error during session write for %s: %s", key, e)
            raise BackendError("Memcached error during session write") from e

    async def forget(self, key: str) -> None:
        try:
            await self.client.delete(key.encode())
        except (ClientException, OSError) as e:
            logger.error("Memcached error during session deletion for %s: %s", key, e)
            raise BackendError("Memcached error during session deletion") from e


class MemcachedBackend(KeyValueBackend):
    def __init__(
        self,
        client: aiomcache.Client,
        prefix: str = KEY_PREFIX,
        id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        super().__init__(MemcachedStore(client), prefix, id_attempts)
        self.client = client
