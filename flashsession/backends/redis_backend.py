"""Redis session backend on ``redis.asyncio``."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis import ConnectionError as RedisConnectionError
from redis import RedisError

from ..errors import BackendError
from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .keyvalue import KEY_PREFIX, KeyValueBackend

logger = logging.getLogger(__name__)


def _handle_redis_error(operation: str, key: str, error: Exception) -> BackendError:
    """Log a Redis failure and build the error to raise."""
    if isinstance(error, RedisConnectionError):
        logger.error("Redis connection failed during %s for %s: %s", operation, key, error)
        return BackendError(f"Redis connection error during {operation}")
    logger.error("Redis error during %s for %s: %s", operation, key, error)
    return BackendError(f"Redis error during {operation}")


class RedisStore:
    """``KeyValueStore`` over an async Redis client."""

    def __init__(self, client: aioredis.Redis) -> None:
        self.client = client

    async def get(self, key: str) -> str | bytes | None:
        try:
            return await self.client.get(key)
        except RedisError as e:
            raise _handle_redis_error("session read", key, e) from e

    async def put(self, key: str, value: str, seconds: int) -> None:
        try:
            await self.client.set(key, value, ex=seconds or None)
        except RedisError as e:
            raise _handle_redis_error("session write", key, e) from e

    async def forget(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            raise _handle_redis_error("session deletion", key, e) from e


class RedisBackend(KeyValueBackend):
    """Redis sessions with TTLs, plus a SCAN-based sweep over the key prefix."""

    def __init__(
        self,
        client: aioredis.Redis,
        prefix: str = KEY_PREFIX,
        id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        super().__init__(RedisStore(client), prefix, id_attempts)
        self.client = client

    @classmethod
    def from_url(cls, url: str, **kwargs) -> RedisBackend:
        return cls(aioredis.from_url(url, decode_responses=True), **kwargs)

    async def clean(self, threshold: int) -> int:
        removed = 0
        try:
            async for key in self.client.scan_iter(match=f"{self.prefix}*"):
                record = SessionRecord.loads(await self.client.get(key))
                if record is None or (record.last_activity or 0) < threshold:
                    removed += await self.client.delete(key)
        except RedisError as e:
            raise _handle_redis_error("session clean", self.prefix, e) from e
        return removed
