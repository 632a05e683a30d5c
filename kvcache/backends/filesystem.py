"""File system cache backend."""

from __future__ import annotations

import hashlib
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kvcache.serialization import Serializer

from .base import DEFAULT_TTL, BaseBackend

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".cache"


class FileSystemBackend(BaseBackend):
    """One msgpack file per key inside a directory owned by the cache."""

    def __init__(
        self,
        path: Path | str,
        ttl: int = DEFAULT_TTL,
        prefix: str = "c_",
        serializer: Serializer | None = None,
        clock: Callable[[], float] | None = None,
    ):
        super().__init__(ttl=ttl, serializer=serializer, clock=clock)
        self.path = Path(path)
        self.prefix = prefix
        self.initialize()

    def initialize(self) -> None:
        """Create the cache directory if it does not exist."""
        self.path.mkdir(mode=0o777, parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get file path for key."""
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return self.path / f"{self.prefix}{digest}{CACHE_SUFFIX}"

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Write the entry atomically, replacing any previous file."""
        path = self._get_path(self._check_key(key))
        ttl = self.resolve_ttl(ttl)
        if ttl <= 0:
            logger.debug("Non-positive TTL for %s, removing entry", key)
            self.delete(key)
            return

        payload = self.serializer.dump_envelope(value, self.now() + ttl)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path, prefix=self.prefix, suffix=".tmp"
        )
        try:
            with open(temp_fd, "wb") as f:
                f.write(payload)

            Path(temp_path).replace(path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise

        logger.debug("Cached %s in %s", key, path.name)

    def get(self, key: str, default: Any = None) -> Any:
        """Read the entry, deleting it if it has expired."""
        path = self._get_path(self._check_key(key))
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            logger.debug("Cache miss for %s", key)
            return default

        envelope = self.serializer.load_envelope(data, location=str(path))

        if self.is_expired(envelope.expires_at):
            logger.debug("Cache entry %s expired, removing %s", key, path.name)
            path.unlink(missing_ok=True)
            return default

        return envelope.value

    def delete(self, key: str) -> None:
        """Delete the entry file if present."""
        path = self._get_path(self._check_key(key))
        path.unlink(missing_ok=True)
        logger.debug("Deleted cache entry %s", key)

    def clear(self) -> None:
        """Remove every file directly under the cache directory."""
        removed = 0
        for path in self.path.iterdir():
            if path.is_file() or path.is_symlink():
                path.unlink(missing_ok=True)
                removed += 1

        logger.debug("Cleared %d cache files from %s", removed, self.path)

    def __repr__(self) -> str:
        return f"FileSystemBackend(path={str(self.path)!r}, prefix={self.prefix!r})"
