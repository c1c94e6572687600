"""Shared fixtures for the session test suite."""

from __future__ import annotations

from typing import Generator

import pytest

from flashsession.backends import MemoryBackend
from flashsession.config import SessionSettings, override_settings
from flashsession.cookies import CookieJar


# ── Settings ──────────────────────────────────────────────────────────────

@pytest.fixture
def test_settings(tmp_path) -> Generator[SessionSettings, None, None]:
    """Settings with the GC lottery disabled and storage under tmp_path."""
    s = SessionSettings(
        secret="test-secret-key-for-sessions",
        lifetime=60,
        garbage_collection=(0, 100),
        storage_path=str(tmp_path / "sessions"),
        database_url=f"sqlite:///{tmp_path / 'sessions.db'}",
    )
    override_settings(s)
    yield s
    override_settings(None)


# ── Backends & cookies ────────────────────────────────────────────────────

@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def cookies(test_settings) -> CookieJar:
    return CookieJar.from_settings({}, test_settings)
