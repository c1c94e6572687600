"""Relational session backend on SQLAlchemy.

Schema (names are policy, not contract):
    sessions(id VARCHAR(64) PK, last_activity INTEGER, data TEXT JSON-encoded)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from threading import Lock
from typing import Any

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from ..errors import BackendError
from ..ids import MAX_ID_ATTEMPTS
from ..record import SessionRecord
from .base import DefaultIdentity

logger = logging.getLogger(__name__)


def get_connect_args(url: str) -> dict[str, Any]:
    """Database-specific connection arguments."""
    if url.startswith("sqlite"):
        # Calls arrive from the threadpool
        return {"check_same_thread": False}
    return {}


def create_session_engine(url: str) -> Engine:
    return create_engine(url, connect_args=get_connect_args(url))


def session_table(name: str = "sessions", metadata: MetaData | None = None) -> Table:
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", String(64), primary_key=True),
        Column("last_activity", Integer, nullable=False, index=True),
        Column("data", Text, nullable=False),
    )


class DatabaseBackend(DefaultIdentity):
    """Session backend using any SQLAlchemy engine as its connection source."""

    def __init__(
        self,
        engine: Engine,
        table_name: str = "sessions",
        create_table: bool = True,
        id_attempts: int = MAX_ID_ATTEMPTS,
    ) -> None:
        self.engine = engine
        self.table = session_table(table_name)
        self.id_attempts = id_attempts
        self._sessions = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self._create_table = create_table
        self._table_ready = False
        self._table_lock = Lock()

    async def load(self, key: str) -> SessionRecord | None:
        return await run_in_threadpool(self._load, key)

    async def save(self, record: SessionRecord, config: Mapping[str, Any], exists: bool) -> None:
        await run_in_threadpool(self._save, record, exists)

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self._delete, key)

    async def clean(self, threshold: int) -> int:
        return await run_in_threadpool(self._clean, threshold)

    def _ensure_table(self) -> None:
        """Create the sessions table once, in a thread-safe manner."""
        if self._table_ready or not self._create_table:
            return
        with self._table_lock:
            if not self._table_ready:
                self.table.create(bind=self.engine, checkfirst=True)
                self._table_ready = True
                logger.debug("Session table %s initialized", self.table.name)

    def _load(self, key: str) -> SessionRecord | None:
        try:
            self._ensure_table()
            with self._sessions() as db:
                raw = db.scalar(select(self.table.c.data).where(self.table.c.id == key))
        except SQLAlchemyError as e:
            logger.error("Database error loading session: %s", e)
            raise BackendError("Database error during session load") from e
        return SessionRecord.loads(raw)

    def _save(self, record: SessionRecord, exists: bool) -> None:
        values = {
            "last_activity": record.last_activity or int(time.time()),
            "data": record.dumps(),
        }
        try:
            self._ensure_table()
            with self._sessions() as db:
                try:
                    updated = 0
                    if exists:
                        result = db.execute(
                            update(self.table).where(self.table.c.id == record.id).values(**values)
                        )
                        updated = result.rowcount
                    # The row may have been swept since it was loaded
                    if not updated:
                        db.execute(insert(self.table).values(id=record.id, **values))
                    db.commit()
                except SQLAlchemyError:
                    db.rollback()
                    raise
        except SQLAlchemyError as e:
            logger.error("Database error saving session %s: %s", record.id, e)
            raise BackendError("Database error during session save") from e

    def _delete(self, key: str) -> None:
        try:
            self._ensure_table()
            with self._sessions() as db:
                db.execute(delete(self.table).where(self.table.c.id == key))
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting session: %s", e)
            raise BackendError("Database error during session delete") from e

    def _clean(self, threshold: int) -> int:
        try:
            self._ensure_table()
            with self._sessions() as db:
                result = db.execute(delete(self.table).where(self.table.c.last_activity < threshold))
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error cleaning sessions: %s", e)
            raise BackendError("Database error during session clean") from e
        return result.rowcount
