"""Dialect parity between SQLite and a live MySQL server.

Runs only when KVCACHE_TEST_MYSQL_HOST is set; the other connection
parameters come from KVCACHE_TEST_MYSQL_PORT, _USER, _PASSWORD and
_DATABASE.
"""

import os

import pytest

from kvcache.backends import DatabaseBackend

pytestmark = [
    pytest.mark.mysql,
    pytest.mark.skipif(
        not os.environ.get("KVCACHE_TEST_MYSQL_HOST"),
        reason="KVCACHE_TEST_MYSQL_HOST not set",
    ),
]


@pytest.fixture
def mysql_backend(clock):
    backend = DatabaseBackend(
        driver="mysql",
        host=os.environ["KVCACHE_TEST_MYSQL_HOST"],
        port=int(os.environ.get("KVCACHE_TEST_MYSQL_PORT", "3306")),
        username=os.environ.get("KVCACHE_TEST_MYSQL_USER", "root"),
        password=os.environ.get("KVCACHE_TEST_MYSQL_PASSWORD", ""),
        database=os.environ.get("KVCACHE_TEST_MYSQL_DATABASE", "kvcache_test"),
        ttl=60,
        clock=clock,
    )
    backend.clear()
    yield backend
    backend.clear()
    backend.close()


@pytest.fixture
def sqlite_backend(temp_dir, clock):
    backend = DatabaseBackend(
        driver="sqlite", database=str(temp_dir / "cache.sqlite"), ttl=60, clock=clock
    )
    yield backend
    backend.close()


def run_scenario(backend, clock, structured_value):
    """Apply a fixed operation sequence and record what callers observe."""
    observed = []

    backend.set("a", structured_value)
    backend.set("b", [1, 2, 3], ttl=1)
    backend.set("c", "first")
    backend.set("c", "second")
    backend.set("Foo", 1)
    backend.set("foo", 2)
    backend.set("e", "plain")
    backend.set("\u00e9", "accented")
    backend.delete("FOO")
    observed.append(backend.get("a"))
    observed.append(backend.get("b"))
    observed.append(backend.get("c"))
    observed.append([backend.get(k) for k in ("Foo", "foo", "FOO", "e", "\u00e9")])

    clock.advance(2)
    observed.append(backend.get("b"))

    backend.delete("a")
    backend.delete("never-set")
    observed.append(backend.get("a"))

    backend.set("d", {"n": -1}, ttl=0)
    observed.append(backend.get("d", "absent"))

    backend.clear()
    observed.append([backend.get(k) for k in "abcd"])
    return observed


def test_same_results_on_both_dialects(
    mysql_backend, sqlite_backend, clock, structured_value
):
    start = clock.current
    mysql_results = run_scenario(mysql_backend, clock, structured_value)
    clock.current = start
    sqlite_results = run_scenario(sqlite_backend, clock, structured_value)

    assert mysql_results == sqlite_results
    assert mysql_results[0] == structured_value
    assert mysql_results[3] == [1, 2, None, "plain", "accented"]
    assert mysql_results[4] is None
