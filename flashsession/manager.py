"""Session facade: storage selection and the active payload of each request.

Usage::

    manager = SessionManager(settings)

    # once per request
    await manager.load(cookies)
    manager.put("name", "Robin")
    name = manager.get("name")
    await manager.save()
    manager.end()
"""

from __future__ import annotations

import contextvars
import logging
import random
from collections.abc import Callable, Iterable
from typing import Any

import aiomcache

from .backends import (
    CookieBackend,
    DatabaseBackend,
    DynamoDBSessionBackend,
    FileBackend,
    MemcachedBackend,
    MemoryBackend,
    RedisBackend,
    SessionBackend,
    create_session_engine,
)
from .config import SessionSettings, get_settings
from .cookies import CookieJar
from .errors import ConfigurationError, NotStartedError
from .payload import Payload

logger = logging.getLogger(__name__)

Resolver = Callable[[], SessionBackend]

STORAGES = ("memory", "cookie", "file", "database", "redis", "memcached", "dynamodb")


class SessionManager:
    """Builds storages from settings and tracks the payload of the current request.

    Server-side storages are built once and reused, so their connections are
    shared by every request the manager serves. The active payload is held in
    a context variable: concurrent requests each see their own.
    """

    def __init__(
        self,
        settings: SessionSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.rng = rng
        self._farm: dict[str, Resolver] = {}
        self._storages: dict[str, SessionBackend] = {}
        self._current: contextvars.ContextVar[Payload | None] = contextvars.ContextVar(
            f"flashsession_payload_{id(self)}", default=None
        )

    # ── Storage resolution ────────────────────────────────────────────────

    def extend(self, storage: str, resolver: Resolver) -> None:
        """Register a third-party storage; it takes precedence over built-in names."""
        self._farm[storage] = resolver

    def factory(self, storage: str, cookies: CookieJar | None = None) -> SessionBackend:
        """Get the storage backend registered under ``storage``."""
        if storage in self._farm:
            return self._farm[storage]()

        if storage == "cookie":
            return CookieBackend(
                cookies if cookies is not None else CookieJar.from_settings({}, self.settings),
                self.settings.payload_cookie,
            )

        if storage not in self._storages:
            self._storages[storage] = self._build(storage)
        return self._storages[storage]

    def _build(self, storage: str) -> SessionBackend:
        s = self.settings
        attempts = s.id_attempts

        if storage == "memory":
            return MemoryBackend(id_attempts=attempts)
        if storage == "file":
            return FileBackend(s.storage_path, id_attempts=attempts)
        if storage == "database":
            return DatabaseBackend(
                create_session_engine(s.database_url),
                table_name=s.database_table,
                id_attempts=attempts,
            )
        if storage == "redis":
            return RedisBackend.from_url(s.redis_url, prefix=s.key_prefix, id_attempts=attempts)
        if storage == "memcached":
            return MemcachedBackend(
                aiomcache.Client(s.memcached_host, s.memcached_port),
                prefix=s.key_prefix,
                id_attempts=attempts,
            )
        if storage == "dynamodb":
            return DynamoDBSessionBackend(
                table_name=s.dynamodb_table,
                endpoint_url=s.dynamodb_endpoint,
                region_name=s.dynamodb_region,
                id_attempts=attempts,
            )

        raise ConfigurationError(f"Session storage [{storage}] is not supported.")

    # ── Request lifecycle ─────────────────────────────────────────────────

    def start(self, storage: str | None = None, cookies: CookieJar | None = None) -> Payload:
        """Create the session payload for the current request."""
        cookies = cookies if cookies is not None else CookieJar.from_settings({}, self.settings)
        backend = self.factory(storage or self.settings.storage, cookies)
        payload = Payload(backend, self.settings, cookies, self.rng)
        self._current.set(payload)
        return payload

    async def load(self, cookies: CookieJar | None = None) -> Payload:
        """Start the session and load it from the ID cookie."""
        payload = self.start(self.settings.storage, cookies)
        await payload.load(payload.cookies.get(self.settings.cookie))
        return payload

    def started(self) -> bool:
        return self._current.get() is not None

    @property
    def payload(self) -> Payload:
        payload = self._current.get()
        if payload is None:
            raise NotStartedError("A storage must be set before using the session.")
        return payload

    def end(self) -> None:
        """Drop the current request's payload."""
        self._current.set(None)

    # ── Payload shortcuts ─────────────────────────────────────────────────

    def has(self, key: str) -> bool:
        return self.payload.has(key)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self.payload.put(key, value)

    def flash(self, key: str, value: Any) -> None:
        self.payload.flash(key, value)

    def keep(self, keys: str | Iterable[str]) -> None:
        self.payload.keep(keys)

    def reflash(self) -> None:
        self.payload.reflash()

    def forget(self, key: str) -> None:
        self.payload.forget(key)

    def flush(self) -> None:
        self.payload.flush()

    async def regenerate(self) -> None:
        await self.payload.regenerate()

    def token(self) -> str | None:
        return self.payload.token()

    def activity(self) -> int | None:
        return self.payload.activity()

    async def save(self) -> None:
        await self.payload.save()

    async def clean(self) -> int | None:
        return await self.payload.clean()
