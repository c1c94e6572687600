"""Tests for the Redis session backend.

Uses an AsyncMock client backed by a dict instead of a live server.
"""

import time
from unittest.mock import AsyncMock

import pytest
from redis import ConnectionError as RedisConnectionError

from flashsession.backends import Cleaner, RedisBackend
from flashsession.errors import BackendError
from flashsession.record import SessionRecord


def _mock_client(items=None):
    """Create a mock redis.asyncio client backed by a simple dict."""
    store = dict(items or {})
    ttls = {}
    client = AsyncMock()

    async def mock_get(key):
        return store.get(key)

    async def mock_set(key, value, ex=None):
        store[key] = value
        ttls[key] = ex
        return True

    async def mock_delete(*keys):
        return sum(1 for key in keys if store.pop(key, None) is not None)

    async def mock_scan_iter(match=None):
        prefix = match.rstrip("*")
        for key in list(store):
            if key.startswith(prefix):
                yield key

    client.get = mock_get
    client.set = mock_set
    client.delete = mock_delete
    client.scan_iter = mock_scan_iter
    return client, store, ttls


@pytest.mark.asyncio
async def test_save_and_load(test_settings):
    client, store, ttls = _mock_client()
    backend = RedisBackend(client)

    record = SessionRecord(id="sess-1", data={"name": "Robin"})
    await backend.save(record, test_settings.params(), False)

    assert "session:sess-1" in store
    assert ttls["session:sess-1"] == 3600
    assert await backend.load("sess-1") == record


@pytest.mark.asyncio
async def test_load_nonexistent():
    client, _, _ = _mock_client()
    assert await RedisBackend(client).load("missing") is None


@pytest.mark.asyncio
async def test_delete(test_settings):
    client, store, _ = _mock_client()
    backend = RedisBackend(client)
    await backend.save(SessionRecord(id="sess-1"), test_settings.params(), False)
    await backend.delete("sess-1")
    await backend.delete("sess-1")

    assert store == {}


@pytest.mark.asyncio
async def test_clean_sweeps_only_stale_sessions_under_prefix():
    now = int(time.time())
    client, store, _ = _mock_client({
        "session:stale": SessionRecord(id="stale", last_activity=now - 7200).dumps(),
        "session:active": SessionRecord(id="active", last_activity=now).dumps(),
        "session:junk": "not json",
        "other:key": "untouched",
    })

    removed = await RedisBackend(client).clean(now - 3600)

    assert removed == 2
    assert set(store) == {"session:active", "other:key"}


@pytest.mark.asyncio
async def test_connection_errors_become_backend_errors():
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("refused")

    with pytest.raises(BackendError, match="connection"):
        await RedisBackend(client).load("sess-1")


def test_is_cleaner():
    client, _, _ = _mock_client()
    assert isinstance(RedisBackend(client), Cleaner)


def test_from_url():
    backend = RedisBackend.from_url("redis://localhost:6379", prefix="app:")
    assert backend.prefix == "app:"
