"""Pluggable cache backends.

Provides one contract with interchangeable storage:

- **FileSystemBackend**: one msgpack file per key in a directory
- **DatabaseBackend**: one row per key in a ``cache`` table (SQLite, MySQL)

Both store an absolute expiry timestamp and purge expired entries lazily.
"""

from .base import DEFAULT_TTL, BaseBackend
from .database import DatabaseBackend
from .dialects import DIALECTS, MySQLDialect, SQLiteDialect
from .filesystem import FileSystemBackend

__all__ = [
    "DEFAULT_TTL",
    "DIALECTS",
    "BaseBackend",
    "DatabaseBackend",
    "FileSystemBackend",
    "MySQLDialect",
    "SQLiteDialect",
]
