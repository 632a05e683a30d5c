"""Cache front end that routes calls to the configured backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from msgspec.structs import asdict

from kvcache.backends.base import BaseBackend
from kvcache.backends.database import DatabaseBackend
from kvcache.backends.filesystem import FileSystemBackend
from kvcache.config import load_config, parse_options
from kvcache.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BACKENDS: dict[str, Callable[..., BaseBackend]] = {
    "file": FileSystemBackend,
    "database": DatabaseBackend,
}


def create_backend(
    driver: str, options: dict[str, Any] | None = None, **kwargs: Any
) -> BaseBackend:
    """Build the backend registered under driver from its option mapping.

    Extra keyword arguments (serializer, clock) go to the backend unchanged.
    """
    if driver not in BACKENDS:
        raise ConfigurationError(f"Driver '{driver}' not supported.")

    parsed = parse_options(driver, options)
    return BACKENDS[driver](**asdict(parsed), **kwargs)


class Cache:
    """Explicitly owned cache instance.

    The backend is chosen once, when the cache is built, and every
    operation is forwarded to it.
    """

    def __init__(self, backend: BaseBackend, driver: str | None = None):
        self._backend = backend
        self._driver = driver

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None, **kwargs: Any) -> Cache:
        """Create a cache from a configuration mapping.

        The mapping has a ``driver`` name and a ``drivers`` section holding
        the options for each driver. Without a mapping the configuration
        is loaded from the default locations.
        """
        if config is None:
            config = load_config()

        driver = config.get("driver")
        drivers = config.get("drivers") or {}
        if not driver or driver not in drivers:
            raise ConfigurationError(f"Driver '{driver}' not found.")

        backend = create_backend(driver, drivers[driver], **kwargs)
        logger.info("Opened %s cache backend", driver)
        return cls(backend, driver=driver)

    @property
    def backend(self) -> BaseBackend:
        return self._backend

    @property
    def driver(self) -> str | None:
        return self._driver

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._backend.set(key, value, ttl)

    def get(self, key: str, default: Any = None) -> Any:
        return self._backend.get(key, default)

    def delete(self, key: str) -> None:
        self._backend.delete(key)

    def clear(self) -> None:
        self._backend.clear()

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> Cache:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Cache({self._backend!r})"
