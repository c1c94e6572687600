from .base import Cleaner, DefaultIdentity, SessionBackend
from .cookie import CookieBackend
from .database import DatabaseBackend, create_session_engine
from .dynamodb import DynamoDBSessionBackend
from .file import FileBackend
from .keyvalue import KeyValueBackend, KeyValueStore
from .memcached import MemcachedBackend
from .memory import MemoryBackend
from .redis_backend import RedisBackend

__all__ = [
    "SessionBackend",
    "Cleaner",
    "DefaultIdentity",
    "MemoryBackend",
    "CookieBackend",
    "FileBackend",
    "DatabaseBackend",
    "create_session_engine",
    "RedisBackend",
    "MemcachedBackend",
    "DynamoDBSessionBackend",
    "KeyValueBackend",
    "KeyValueStore",
]
