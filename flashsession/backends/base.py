"""Session storage contract."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Protocol, runtime_checkable

from ..ids import MAX_ID_ATTEMPTS, fresh_record, generate_id
from ..record import SessionRecord


@runtime_checkable
class SessionBackend(Protocol):
    """Protocol for session storage."""

    async def load(self, key: str) -> SessionRecord | None:
        """Load a session by ID. Returns None if not found or invalid."""
        ...

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        """Save a session. ``exists`` is False for records never stored under this ID."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a session. Deleting an unknown ID is not an error."""
        ...

    async def fresh(self) -> SessionRecord:
        """Create an empty session record with a new ID."""
        ...

    async def new_id(self) -> str:
        """Get a session ID not assigned to any current session."""
        ...


@runtime_checkable
class Cleaner(Protocol):
    """Backends that can sweep expired sessions in bulk."""

    async def clean(self, threshold: int) -> int:
        """Delete sessions last active before ``threshold``. Returns the count removed."""
        ...


class DefaultIdentity:
    """Default ``fresh``/``new_id`` built on the shared helpers in ``flashsession.ids``."""

    self_assigns_id: ClassVar[bool] = False
    id_attempts: int = MAX_ID_ATTEMPTS

    async def fresh(self) -> SessionRecord:
        return await fresh_record(self, self.id_attempts)  # type: ignore[arg-type]

    async def new_id(self) -> str:
        return await generate_id(self, self.id_attempts)  # type: ignore[arg-type]
