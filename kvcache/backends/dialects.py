"""SQL dialects for the database cache backend.

Each dialect knows how to open a DB-API connection for its engine, how to
probe for and create the cache table, and how to express the single
statement upsert used by ``set``.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from typing import Any

import pymysql

from kvcache.exceptions import CacheConnectionError, ConfigurationError

TABLE_NAME = "cache"


class Dialect(ABC):
    """SQL and connection details for one database engine."""

    name: str = ""
    placeholder: str = "?"
    errors: tuple[type[Exception], ...] = ()

    table_exists_sql: str = ""
    create_table_sql: str = ""
    upsert_sql: str = ""

    def __init__(self, table: str = TABLE_NAME):
        self.table = table

    @abstractmethod
    def connect(self, **options: Any) -> Any:
        """Open a connection in autocommit mode."""
        pass

    def render(self, sql: str) -> str:
        """Fill in the table name and parameter placeholders."""
        return sql.format(table=self.table, p=self.placeholder)

    @property
    def select_sql(self) -> str:
        return self.render(
            "SELECT cache_value, expires_at FROM {table} WHERE cache_key = {p}"
        )

    @property
    def delete_sql(self) -> str:
        return self.render("DELETE FROM {table} WHERE cache_key = {p}")

    @property
    def delete_expired_sql(self) -> str:
        return self.render(
            "DELETE FROM {table} WHERE cache_key = {p} AND expires_at < {p}"
        )

    @property
    def clear_sql(self) -> str:
        return self.render("DELETE FROM {table}")


class SQLiteDialect(Dialect):
    """Embedded, file based engine."""

    name = "sqlite"
    placeholder = "?"
    errors = (sqlite3.Error,)

    table_exists_sql = """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
            AND name = {p}
    """

    create_table_sql = """
        CREATE TABLE IF NOT EXISTS {table} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            cache_key TEXT UNIQUE NOT NULL,
            cache_value BLOB NOT NULL,
            expires_at INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """

    upsert_sql = """
        INSERT INTO {table} (cache_key, cache_value, expires_at)
        VALUES ({p}, {p}, {p})
        ON CONFLICT(cache_key) DO UPDATE SET
            cache_value = excluded.cache_value,
            expires_at = excluded.expires_at
    """

    def connect(self, **options: Any) -> sqlite3.Connection:
        database = options.get("database")
        if not database:
            raise ConfigurationError("sqlite driver requires a 'database' path")

        try:
            return sqlite3.connect(
                str(database), isolation_level=None, check_same_thread=False
            )
        except sqlite3.Error as e:
            raise CacheConnectionError(self.name, str(e)) from e


class MySQLDialect(Dialect):
    """Client/server engine reached through PyMySQL."""

    name = "mysql"
    placeholder = "%s"
    errors = (pymysql.MySQLError,)

    table_exists_sql = """
        SELECT COUNT(*)
        FROM information_schema.tables
        WHERE table_schema = DATABASE()
            AND table_name = {p}
    """

    # Binary collation keeps key matching case and accent sensitive
    create_table_sql = """
        CREATE TABLE IF NOT EXISTS {table} (
            id INT AUTO_INCREMENT PRIMARY KEY,
            cache_key VARCHAR(255) CHARACTER SET utf8mb4 COLLATE utf8mb4_bin
                UNIQUE NOT NULL,
            cache_value LONGBLOB NOT NULL,
            expires_at BIGINT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """

    # VALUES() is deprecated since MySQL 8.0.20; the row alias form is not
    # accepted by MariaDB
    upsert_sql = """
        INSERT INTO {table} (cache_key, cache_value, expires_at)
        VALUES ({p}, {p}, {p})
        ON DUPLICATE KEY UPDATE
            cache_value = VALUES(cache_value),
            expires_at = VALUES(expires_at)
    """

    def connect(self, **options: Any) -> pymysql.connections.Connection:
        params = {
            "host": options.get("host") or "127.0.0.1",
            "port": int(options.get("port") or 3306),
            "user": options.get("username"),
            "password": options.get("password") or "",
            "database": options.get("database"),
            "charset": options.get("charset") or "utf8mb4",
            "autocommit": True,
            # Reject truncated or invalid data instead of warning
            "init_command": "SET SESSION sql_mode = 'STRICT_ALL_TABLES'",
        }
        if options.get("collation"):
            params["collation"] = options["collation"]
        if not params["database"]:
            raise ConfigurationError("mysql driver requires a 'database' name")

        try:
            return pymysql.connect(**params)
        except pymysql.MySQLError as e:
            raise CacheConnectionError(self.name, str(e)) from e


DIALECTS: dict[str, type[Dialect]] = {
    SQLiteDialect.name: SQLiteDialect,
    MySQLDialect.name: MySQLDialect,
}


def get_dialect(name: str, table: str = TABLE_NAME) -> Dialect:
    """Return a dialect instance for a driver name."""
    try:
        dialect_cls = DIALECTS[name]
    except KeyError:
        raise ConfigurationError(
            f"Database driver '{name}' not supported "
            f"(expected one of: {', '.join(sorted(DIALECTS))})"
        ) from None
    return dialect_cls(table)
