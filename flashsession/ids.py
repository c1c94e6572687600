"""Session ID generation."""

from __future__ import annotations

import logging
import secrets
import string
from typing import TYPE_CHECKING

from .errors import GenerationExhaustedError
from .record import SessionRecord

if TYPE_CHECKING:
    from .backends.base import SessionBackend

logger = logging.getLogger(__name__)

ID_LENGTH = 40
MAX_ID_ATTEMPTS = 10

_ALPHABET = string.ascii_letters + string.digits


def random_token(length: int = ID_LENGTH) -> str:
    """Random alphanumeric string from the system CSPRNG."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


async def generate_id(backend: SessionBackend, attempts: int = MAX_ID_ATTEMPTS) -> str:
    """Get a session ID that isn't assigned to any stored session.

    Backends flagged with ``self_assigns_id`` have no server-side index to
    collide against, so any random token will do.
    """
    if getattr(backend, "self_assigns_id", False):
        return random_token()

    for _ in range(attempts):
        candidate = random_token()
        if await backend.load(candidate) is None:
            return candidate
        logger.debug("Session ID collision, retrying")

    raise GenerationExhaustedError(f"No unused session ID found after {attempts} attempts")


async def fresh_record(backend: SessionBackend, attempts: int = MAX_ID_ATTEMPTS) -> SessionRecord:
    """Build a brand-new, empty session record."""
    return SessionRecord(id=await generate_id(backend, attempts))
