"""Configuration loading for the cache."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import msgspec
import yaml

from kvcache.backends.base import DEFAULT_TTL
from kvcache.exceptions import ConfigurationError


class FileOptions(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Options for the file backend."""

    path: str = msgspec.field(
        default_factory=lambda: os.path.join(tempfile.gettempdir(), ".cache")
    )
    ttl: int = DEFAULT_TTL
    prefix: str = "c_"


class DatabaseOptions(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Options for the database backend.

    Only ``driver``, ``database`` and ``ttl`` apply to sqlite; the rest are
    client/server connection parameters for mysql.
    """

    driver: str = "sqlite"
    database: str = msgspec.field(
        default_factory=lambda: os.path.join(tempfile.gettempdir(), "cache.sqlite")
    )
    host: str = "127.0.0.1"
    port: int = 3306
    username: str | None = None
    password: str | None = None
    charset: str = "utf8mb4"
    collation: str | None = None
    ttl: int = DEFAULT_TTL


OPTION_TYPES: dict[str, type[msgspec.Struct]] = {
    "file": FileOptions,
    "database": DatabaseOptions,
}


def default_config() -> dict[str, Any]:
    """Built-in configuration used when no file overrides it."""
    return {
        "driver": "file",
        "drivers": {
            "file": msgspec.to_builtins(FileOptions()),
            "database": msgspec.to_builtins(DatabaseOptions()),
        },
    }


def parse_options(driver: str, options: dict[str, Any] | None) -> msgspec.Struct:
    """Validate a driver's option mapping into its typed struct."""
    try:
        options_type = OPTION_TYPES[driver]
    except KeyError:
        raise ConfigurationError(f"Driver '{driver}' not supported.") from None

    try:
        return msgspec.convert(options or {}, options_type, str_keys=True)
    except msgspec.ValidationError as e:
        raise ConfigurationError(f"Invalid options for driver '{driver}': {e}") from e


class Config:
    """Configuration file handling."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "kvcache" / "config.yaml")

        # Project config
        paths.append(Path(".kvcache.yaml"))
        paths.append(Path("kvcache.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load defaults, config files and environment overrides.

    With an explicit path only that file is read; otherwise every default
    location that exists is merged, last one winning.
    """
    config = default_config()

    paths = [path] if path else Config.get_config_paths()
    for config_path in paths:
        if path or config_path.exists():
            config = Config.merge_configs(config, Config.from_file(config_path))

    env_overrides: dict[str, Any] = {}
    if driver := os.environ.get("KVCACHE_DRIVER"):
        env_overrides["driver"] = driver
    if cache_path := os.environ.get("KVCACHE_PATH"):
        env_overrides.setdefault("drivers", {})["file"] = {"path": cache_path}
    if database := os.environ.get("KVCACHE_DATABASE"):
        env_overrides.setdefault("drivers", {})["database"] = {"database": database}

    return Config.merge_configs(config, env_overrides)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
