"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate environment variables for each test.

    Keeps KVCACHE_* overrides set by one test from leaking into others.
    """
    original_env = os.environ.copy()
    for name in ("KVCACHE_DRIVER", "KVCACHE_PATH", "KVCACHE_DATABASE"):
        monkeypatch.delenv(name, raising=False)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def isolated_config_home(tmp_path, monkeypatch):
    """Point config discovery at an empty directory."""
    config_home = tmp_path / "config-home"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.chdir(tmp_path)
    return config_home
