"""File system session backend: one JSON document per session."""

from __future__ import annotations

import logging
import os
import re
import secrets
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from starlette.concurrency import run_in_threadpool

from ..errors import BackendError
from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .base import DefaultIdentity

logger = logging.getLogger(__name__)

# IDs double as file names, so anything but letters and digits is rejected
_VALID_ID = re.compile(r"[A-Za-z0-9]+")
# Left behind by a write that died before its os.replace
_TEMP_FILE = re.compile(r"\.[A-Za-z0-9]+\.[0-9a-f]+\.tmp")


class FileBackend(DefaultIdentity):
    """Stores each session as ``<directory>/<id>``.

    Writes go to a temporary sibling and are moved into place with
    ``os.replace`` so readers never see a half-written document. The sweep
    uses file modification times, which track the last save.
    """

    def __init__(self, directory: str | Path, id_attempts: int = MAX_ID_ATTEMPTS) -> None:
        self.directory = Path(directory)
        self.id_attempts = id_attempts

    async def load(self, key: str) -> SessionRecord | None:
        if not _VALID_ID.fullmatch(key or ""):
            return None
        return await run_in_threadpool(self._read, key)

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        await run_in_threadpool(self._write, record)

    async def delete(self, key: str) -> None:
        if not _VALID_ID.fullmatch(key or ""):
            return
        await run_in_threadpool(self._unlink, self.directory / key)

    async def clean(self, threshold: int) -> int:
        return await run_in_threadpool(self._sweep, threshold)

    def _read(self, key: str) -> SessionRecord | None:
        try:
            raw = (self.directory / key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to read session file %s: %s", key, e)
            raise BackendError("Session file could not be read") from e
        return SessionRecord.loads(raw)

    def _write(self, record: SessionRecord) -> None:
        target = self.directory / record.id
        tmp = self.directory / f".{record.id}.{secrets.token_hex(4)}.tmp"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(record.dumps(), encoding="utf-8")
            os.replace(tmp, target)
        except OSError as e:
            logger.error("Failed to write session file %s: %s", record.id, e)
            tmp.unlink(missing_ok=True)
            raise BackendError("Session file could not be written") from e

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete session file %s: %s", path.name, e)
            raise BackendError("Session file could not be deleted") from e

    def _sweep(self, threshold: int) -> int:
        if not self.directory.is_dir():
            return 0

        removed = 0
        try:
            for path in self.directory.iterdir():
                session = _VALID_ID.fullmatch(path.name) is not None
                if not session and not _TEMP_FILE.fullmatch(path.name):
                    continue
                try:
                    if path.stat().st_mtime < threshold:
                        path.unlink(missing_ok=True)
                        if session:
                            removed += 1
                except FileNotFoundError:
                    continue  # deleted by a concurrent request
        except OSError as e:
            logger.error("Failed to sweep session directory %s: %s", self.directory, e)
            raise BackendError("Session directory could not be swept") from e
        return removed
