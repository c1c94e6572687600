"""Session configuration via environment variables."""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .params import Params


class SessionSettings(BaseSettings):
    storage: str = "memory"  # memory, cookie, file, database, redis, memcached, dynamodb
    cookie: str = "session_id"
    payload_cookie: str = "session_payload"
    lifetime: int = 60  # minutes
    expire_on_close: bool = False
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    same_site: str = "lax"
    garbage_collection: tuple[int, int] = (2, 100)
    secret: str = "change-me-in-production"
    id_attempts: int = 10
    key_prefix: str = "session:"
    storage_path: str = str(Path(tempfile.gettempdir()) / "flashsession")
    database_url: str = "sqlite:///sessions.db"
    database_table: str = "sessions"
    redis_url: str = "redis://localhost:6379"
    memcached_host: str = "localhost"
    memcached_port: int = 11211
    dynamodb_table: str = "sessions"
    dynamodb_endpoint: str = ""  # For local DynamoDB
    dynamodb_region: str = "us-west-2"

    model_config = {"env_prefix": "SESSION_", "case_sensitive": False}

    @field_validator("garbage_collection")
    @classmethod
    def _check_lottery(cls, value: tuple[int, int]) -> tuple[int, int]:
        numerator, denominator = value
        if denominator < 1 or numerator < 0:
            raise ValueError("garbage_collection must be [numerator >= 0, denominator >= 1]")
        return value

    @property
    def lifetime_seconds(self) -> int:
        return self.lifetime * 60

    def params(self) -> Params:
        """Read-only view handed to storage backends."""
        return Params(self.model_dump())


settings: SessionSettings | None = None


def get_settings() -> SessionSettings:
    global settings
    if settings is None:
        settings = SessionSettings()
    return settings


def override_settings(s: SessionSettings | None) -> None:
    """For testing: inject a SessionSettings instance."""
    global settings
    settings = s
