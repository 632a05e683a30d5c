"""Base cache backend interface."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from kvcache.serialization import Serializer

DEFAULT_TTL = 3600


class BaseBackend(ABC):
    """Abstract base class for cache backends.

    Subclasses store entries with an absolute expiry timestamp and purge
    expired ones lazily, on the first ``get`` that observes them.
    """

    def __init__(
        self,
        ttl: int = DEFAULT_TTL,
        serializer: Serializer | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.ttl = self._validate_ttl(ttl)
        self.serializer = serializer or Serializer()
        self._clock = clock or time.time

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value under key."""
        pass

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for key, or default."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def now(self) -> int:
        """Current wall-clock time in whole seconds."""
        return int(self._clock())

    def resolve_ttl(self, ttl: int | None) -> int:
        """Return the effective TTL, falling back to the backend default."""
        if ttl is None:
            return self.ttl
        return self._validate_ttl(ttl)

    def is_expired(self, expires_at: int) -> bool:
        return self.now() > expires_at

    @staticmethod
    def _validate_ttl(ttl: Any) -> int:
        if isinstance(ttl, bool) or not isinstance(ttl, int):
            raise ValueError(f"TTL must be an integer number of seconds, got {ttl!r}")
        return ttl

    @staticmethod
    def _check_key(key: Any) -> str:
        if not isinstance(key, str):
            raise TypeError(f"Cache key must be a string, got {type(key).__name__}")
        try:
            key.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError(f"Cache key must be valid UTF-8 text: {e.reason}") from e
        return key
