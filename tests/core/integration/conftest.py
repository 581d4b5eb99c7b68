"""Fixtures for ha-arbiter integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ha_arbiter.adapters.fakes import FakeTimeProvider
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.adapters.ports import LeaseStorePort
from ha_arbiter.adapters.sqlite_store import SQLiteLeaseStore
from tests.core.integration.cluster import ClusterFixture


@pytest.fixture
def clock() -> FakeTimeProvider:
    return FakeTimeProvider(start=1000.0)


@pytest.fixture(params=["memory", "sqlite"])
def shared_store(
    request: pytest.FixtureRequest, clock: FakeTimeProvider, tmp_path: Path
) -> LeaseStorePort:
    if request.param == "memory":
        return InMemoryLeaseStore(time_provider=clock)
    return SQLiteLeaseStore(tmp_path / "cluster.db", time_provider=clock)


@pytest.fixture
def cluster(shared_store: LeaseStorePort, clock: FakeTimeProvider) -> ClusterFixture:
    return ClusterFixture(shared_store, clock)
