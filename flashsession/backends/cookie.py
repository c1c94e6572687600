"""Client-held session backend.

The whole record travels in a signed cookie, so there is no server-side
store to query: ``load`` and ``delete`` act on the request's ``CookieJar``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, ClassVar

from ..cookies import CookieJar
from ..record import SessionRecord
from .base import DefaultIdentity

logger = logging.getLogger(__name__)

PAYLOAD_COOKIE = "session_payload"
MAX_COOKIE_BYTES = 4096


class CookieBackend(DefaultIdentity):
    self_assigns_id: ClassVar[bool] = True

    def __init__(self, cookies: CookieJar, payload_cookie: str = PAYLOAD_COOKIE) -> None:
        self.cookies = cookies
        self.payload_cookie = payload_cookie

    async def load(self, key: str) -> SessionRecord | None:
        raw = self.cookies.get(self.payload_cookie)
        if not isinstance(raw, str):
            return None
        return SessionRecord.loads(raw)

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        raw = record.dumps()
        if len(raw) > MAX_COOKIE_BYTES:
            logger.warning("Session payload is %d bytes; browsers may drop the cookie", len(raw))

        minutes = 0 if config.get("expire_on_close") else config.get("lifetime", 0)
        self.cookies.put(
            self.payload_cookie,
            raw,
            minutes,
            config.get("path", "/"),
            config.get("domain"),
            config.get("secure", False),
        )

    async def delete(self, key: str) -> None:
        self.cookies.forget(self.payload_cookie)
