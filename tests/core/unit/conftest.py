"""Shared fixtures for ha-arbiter core unit tests."""

from __future__ import annotations

import pytest

from ha_arbiter.adapters.fakes import FakeMetricsAdapter, FakeTimeProvider
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from tests.core.unit.fakes import FakeEventEmitter, FakeLoggingAdapter


@pytest.fixture
def clock() -> FakeTimeProvider:
    return FakeTimeProvider(start=1_000.0)


@pytest.fixture
def store(clock: FakeTimeProvider) -> InMemoryLeaseStore:
    """In-memory store on the fake clock with a 60s failover delay."""
    return InMemoryLeaseStore(time_provider=clock, failover_delay=60.0)


@pytest.fixture
def fake_logger() -> FakeLoggingAdapter:
    return FakeLoggingAdapter()


@pytest.fixture
def events() -> FakeEventEmitter:
    return FakeEventEmitter()


@pytest.fixture
def metrics() -> FakeMetricsAdapter:
    return FakeMetricsAdapter()
