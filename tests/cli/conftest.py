"""Fixtures for CLI tests."""

import pytest
import yaml
from click.testing import CliRunner


@pytest.fixture
def config_file(tmp_path, isolated_config_home):
    """Config file pointing both drivers into the test directory."""
    path = tmp_path / "kvcache-test.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "driver": "file",
                "drivers": {
                    "file": {"path": str(tmp_path / "cache"), "ttl": 600},
                    "database": {
                        "driver": "sqlite",
                        "database": str(tmp_path / "cache.sqlite"),
                        "password": "hunter2",
                    },
                },
            }
        )
    )
    return path


@pytest.fixture
def cli_runner(config_file):
    """Click runner that always passes the test config file."""

    class KVCacheCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from kvcache.cli.main import cli

            return super().invoke(
                cli, ["--no-color", "--config", str(config_file), *args], **kwargs
            )

    return KVCacheCliRunner()
