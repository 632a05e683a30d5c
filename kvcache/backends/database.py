"""Relational database cache backend."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from contextlib import closing
from typing import Any

from kvcache.exceptions import StatementError
from kvcache.serialization import Serializer

from .base import DEFAULT_TTL, BaseBackend
from .dialects import TABLE_NAME, Dialect, get_dialect

logger = logging.getLogger(__name__)


class DatabaseBackend(BaseBackend):
    """One row per key in a single ``cache`` table.

    The connection is opened and the table bootstrapped on construction.
    Statements run in autocommit mode, so every operation is a single
    atomic statement from the engine's point of view.
    """

    def __init__(
        self,
        driver: str = "sqlite",
        database: str | None = None,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        charset: str | None = None,
        collation: str | None = None,
        ttl: int = DEFAULT_TTL,
        table: str = TABLE_NAME,
        serializer: Serializer | None = None,
        clock: Callable[[], float] | None = None,
    ):
        super().__init__(ttl=ttl, serializer=serializer, clock=clock)
        self.dialect: Dialect = get_dialect(driver, table)
        self._lock = threading.RLock()
        self.conn = self.dialect.connect(
            database=database,
            host=host,
            port=port,
            username=username,
            password=password,
            charset=charset,
            collation=collation,
        )
        try:
            self.initialize()
        except Exception:
            self.close()
            raise

    @property
    def connection(self) -> Any:
        """Get the connection, ensuring it is still open."""
        if self.conn is None:
            raise RuntimeError("Database connection is closed")
        return self.conn

    def initialize(self) -> None:
        """Create the cache table if it does not exist yet.

        Another process may create the table between the probe and the
        ``CREATE``, which is why the DDL itself is ``IF NOT EXISTS``.
        """
        rows = self._execute(
            "initialize",
            self.dialect.render(self.dialect.table_exists_sql),
            (self.dialect.table,),
            fetch=True,
        )
        if rows and rows[0][0]:
            return

        self._execute("initialize", self.dialect.render(self.dialect.create_table_sql))
        logger.info(
            "Created %s table '%s'", self.dialect.name, self.dialect.table
        )

    def _execute(
        self,
        operation: str,
        sql: str,
        params: tuple = (),
        fetch: bool = False,
    ) -> list[tuple] | None:
        """Run one statement, wrapping driver errors."""
        with self._lock:
            try:
                with closing(self.connection.cursor()) as cursor:
                    cursor.execute(sql, params)
                    if fetch:
                        return list(cursor.fetchall())
                    return None
            except self.dialect.errors as e:
                raise StatementError(operation, str(e)) from e

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Insert or replace the row for key in a single statement."""
        self._check_key(key)
        ttl = self.resolve_ttl(ttl)
        if ttl <= 0:
            logger.debug("Non-positive TTL for %s, removing entry", key)
            self.delete(key)
            return

        payload = self.serializer.dumps(value)
        self._execute(
            "set",
            self.dialect.render(self.dialect.upsert_sql),
            (key, payload, self.now() + ttl),
        )
        logger.debug("Cached %s in %s", key, self.dialect.table)

    def get(self, key: str, default: Any = None) -> Any:
        """Fetch the row for key, deleting it if it has expired."""
        self._check_key(key)
        rows = self._execute("get", self.dialect.select_sql, (key,), fetch=True)
        if not rows:
            logger.debug("Cache miss for %s", key)
            return default

        payload, expires_at = rows[0]
        now = self.now()
        if now > expires_at:
            logger.debug("Cache entry %s expired, removing row", key)
            self._execute("get", self.dialect.delete_expired_sql, (key, now))
            return default

        return self.serializer.loads(
            bytes(payload), location=f"{self.dialect.table}[{key!r}]"
        )

    def delete(self, key: str) -> None:
        self._check_key(key)
        self._execute("delete", self.dialect.delete_sql, (key,))
        logger.debug("Deleted cache entry %s", key)

    def clear(self) -> None:
        """Delete every row; the table itself is kept."""
        self._execute("clear", self.dialect.clear_sql)
        logger.debug("Cleared cache table '%s'", self.dialect.table)

    def close(self) -> None:
        """Close database connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __repr__(self) -> str:
        return (
            f"DatabaseBackend(driver={self.dialect.name!r}, "
            f"table={self.dialect.table!r})"
        )
