"""Test helpers shared across modules."""

from __future__ import annotations

import time
from typing import Any

from flashsession.config import SessionSettings
from flashsession.payload import Payload
from flashsession.record import SessionRecord


async def start_request(backend, settings, session_id: str | None = None, **kwargs: Any) -> Payload:
    """Simulate the start of a request: build a payload and load it."""
    payload = Payload(backend, settings, **kwargs)
    await payload.load(session_id)
    return payload


def stale_record(settings: SessionSettings, **data: Any) -> SessionRecord:
    """A record whose last activity is one minute past the lifetime."""
    return SessionRecord(
        id="a" * 40,
        data={"csrf_token": "old-token", **data},
        last_activity=int(time.time()) - (settings.lifetime + 1) * 60,
    )
