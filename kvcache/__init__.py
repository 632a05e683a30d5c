"""Key-value cache with pluggable storage backends and per-entry TTL.

Main components:
- Cache: front end bound to one backend chosen from configuration
- FileSystemBackend: file per key in a directory
- DatabaseBackend: row per key in a SQLite or MySQL table
- Serializer: msgspec MessagePack encoding shared by the backends
"""

from kvcache.backends import BaseBackend, DatabaseBackend, FileSystemBackend
from kvcache.cache import Cache, create_backend
from kvcache.config import load_config
from kvcache.exceptions import (
    CacheConnectionError,
    CacheError,
    ConfigurationError,
    DeserializationError,
    SerializationError,
    StatementError,
)
from kvcache.serialization import Serializer

__version__ = "1.0.0"

__all__ = [
    # Front end
    "Cache",
    "create_backend",
    "load_config",
    # Backends
    "BaseBackend",
    "DatabaseBackend",
    "FileSystemBackend",
    "Serializer",
    # Errors
    "CacheError",
    "CacheConnectionError",
    "ConfigurationError",
    "DeserializationError",
    "SerializationError",
    "StatementError",
]
