"""The per-request session state machine."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterable
from typing import Any

from .backends.base import Cleaner, SessionBackend
from .config import SessionSettings, get_settings
from .cookies import CookieJar
from .errors import NotStartedError
from .ids import random_token
from .record import SessionRecord

logger = logging.getLogger(__name__)

CSRF_TOKEN = "csrf_token"
CSRF_TOKEN_LENGTH = 40


class Payload:
    """Session data for one request.

    Reads see three partitions in order: persistent data, flash data written
    this request (``new``) and flash data written last request (``old``).
    ``save()`` ages the flash data, so a flashed value is readable for the
    rest of the request that wrote it and during the next one.

    Usage::

        payload = Payload(MemoryBackend(), settings, cookies)
        await payload.load(cookies.get(settings.cookie))
        payload.flash("status", "Profile updated")
        await payload.save()
    """

    def __init__(
        self,
        storage: SessionBackend,
        settings: SessionSettings | None = None,
        cookies: CookieJar | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.storage = storage
        self.settings = settings or get_settings()
        self.cookies = cookies if cookies is not None else CookieJar.from_settings({}, self.settings)
        self.rng = rng or random.Random()
        self.session: SessionRecord | None = None
        self.exists = True

    @property
    def record(self) -> SessionRecord:
        if self.session is None:
            raise NotStartedError("The session has not been loaded")
        return self.session

    async def load(self, session_id: str | None) -> None:
        """Load the session for the current request, or start a fresh one."""
        self.exists = True
        self.session = await self.storage.load(session_id) if session_id else None

        if self.session is None or self.expired(self.session):
            if self.session is not None:
                logger.debug("Session expired, issuing a new one")
            self.exists = False
            self.session = await self.storage.fresh()

        # Every session carries a CSRF token
        if not self.has(CSRF_TOKEN):
            self.put(CSRF_TOKEN, random_token(CSRF_TOKEN_LENGTH))

    def expired(self, record: SessionRecord) -> bool:
        if record.last_activity is None:
            return False
        return time.time() - record.last_activity > self.settings.lifetime_seconds

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Get an item from the session, falling back to flash data, then ``default``."""
        record = self.record
        for partition in (record.data, record.new, record.old):
            value = partition.get(key)
            if value is not None:
                return value
        return default

    def put(self, key: str, value: Any) -> None:
        self.record.data[key] = value

    def flash(self, key: str, value: Any) -> None:
        """Write an item that survives until the end of the next request."""
        self.record.new[key] = value

    def reflash(self) -> None:
        """Keep all of last request's flash data for one more request."""
        record = self.record
        record.new = {**record.new, **record.old}

    def keep(self, keys: str | Iterable[str]) -> None:
        """Keep specific flash items for one more request."""
        if isinstance(keys, str):
            keys = [keys]
        for key in keys:
            self.flash(key, self.get(key))

    def forget(self, key: str) -> None:
        self.record.data.pop(key, None)

    def flush(self) -> None:
        """Remove everything except the CSRF token."""
        record = self.record
        record.data = {CSRF_TOKEN: self.token()}
        record.new = {}
        record.old = {}

    async def regenerate(self) -> None:
        """Assign a new ID; the next save stores the data under it."""
        self.record.id = await self.storage.new_id()
        self.exists = False

    def token(self) -> str | None:
        return self.get(CSRF_TOKEN)

    def activity(self) -> int | None:
        return self.record.last_activity

    async def save(self) -> None:
        """Persist the session, send its cookie and maybe sweep expired sessions."""
        record = self.record
        record.last_activity = int(time.time())
        self.age()

        await self.storage.save(record, self.settings.params(), self.exists)
        self.exists = True
        logger.debug("Session saved (%s)", type(self.storage).__name__)

        self.cookie()

        numerator, denominator = self.settings.garbage_collection
        if self.rng.randint(1, denominator) <= numerator:
            await self.clean()

    async def clean(self) -> int | None:
        """Sweep expired sessions if the storage supports it."""
        if not isinstance(self.storage, Cleaner):
            return None
        removed = await self.storage.clean(int(time.time()) - self.settings.lifetime_seconds)
        logger.info("Session sweep removed %d expired sessions", removed)
        return removed

    def age(self) -> None:
        record = self.record
        record.old = record.new
        record.new = {}

    def cookie(self) -> None:
        s = self.settings
        minutes = 0 if s.expire_on_close else s.lifetime
        self.cookies.put(s.cookie, self.record.id, minutes, s.path, s.domain, s.secure)
