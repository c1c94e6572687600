"""The session record persisted by storage backends."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class SessionRecord(BaseModel):
    """One stored session.

    ``data`` is the persistent partition. ``new`` holds flash values written
    during this request, ``old`` the flash values written during the previous
    one.
    """

    id: str
    data: dict[str, Any] = Field(default_factory=dict)
    new: dict[str, Any] = Field(default_factory=dict)
    old: dict[str, Any] = Field(default_factory=dict)
    last_activity: int | None = None

    def dumps(self) -> str:
        return self.model_dump_json()

    @classmethod
    def loads(cls, raw: str | bytes | None) -> SessionRecord | None:
        """Decode a stored document. Returns None if it is missing or corrupt."""
        if not raw:
            return None
        try:
            return cls.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding undecodable session document")
            return None
