"""Pytest configuration for core adapter unit tests."""

from pathlib import Path

import pytest

from ha_arbiter.adapters.fakes import FakeTimeProvider
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.adapters.ports import LeaseStorePort
from ha_arbiter.adapters.sqlite_store import SQLiteLeaseStore


@pytest.fixture(params=["memory", "sqlite"])
def any_store(
    request: pytest.FixtureRequest, clock: FakeTimeProvider, tmp_path: Path
) -> LeaseStorePort:
    """Every local LeaseStorePort implementation on the fake clock.

    Example:
        def test_acquire(any_store):
            assert any_store.acquire_lease("node-a", 60.0) is not None
    """
    if request.param == "memory":
        return InMemoryLeaseStore(time_provider=clock, failover_delay=60.0)
    return SQLiteLeaseStore(tmp_path / "ha.db", time_provider=clock, failover_delay=60.0)
