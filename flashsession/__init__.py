from .backends import (
    Cleaner,
    CookieBackend,
    DatabaseBackend,
    DynamoDBSessionBackend,
    FileBackend,
    KeyValueBackend,
    MemcachedBackend,
    MemoryBackend,
    RedisBackend,
    SessionBackend,
)
from .config import SessionSettings, get_settings, override_settings
from .cookies import CookieJar
from .errors import (
    BackendError,
    ConfigurationError,
    GenerationExhaustedError,
    ImmutabilityViolation,
    NotStartedError,
    SessionError,
)
from .manager import SessionManager
from .middleware import SessionMiddleware
from .params import Params
from .payload import CSRF_TOKEN, Payload
from .record import SessionRecord

__all__ = [
    "SessionManager",
    "Payload",
    "SessionRecord",
    "SessionMiddleware",
    "SessionSettings",
    "get_settings",
    "override_settings",
    "CookieJar",
    "Params",
    "CSRF_TOKEN",
    "SessionBackend",
    "Cleaner",
    "MemoryBackend",
    "CookieBackend",
    "FileBackend",
    "DatabaseBackend",
    "RedisBackend",
    "MemcachedBackend",
    "DynamoDBSessionBackend",
    "KeyValueBackend",
    "SessionError",
    "ConfigurationError",
    "NotStartedError",
    "GenerationExhaustedError",
    "ImmutabilityViolation",
    "BackendError",
]
