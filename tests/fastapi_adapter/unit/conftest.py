"""Fixtures for FastAPI adapter unit tests."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from ha_arbiter.adapters.fakes import FakeMetricsAdapter, FakeTimeProvider
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.domain.exceptions import StoreUnavailableError
from ha_arbiter.domain.settings import ArbiterSettings
from ha_arbiter.runtime import ArbiterRuntime, build_runtime
from ha_arbiter_fastapi import create_app


class OutageStore:
    """Wraps a store; every call fails while down is set."""

    def __init__(self, store: InMemoryLeaseStore) -> None:
        self._store = store
        self.down = False

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._store, name)
        if not callable(attr):
            return attr

        def call(*args: Any, **kwargs: Any) -> Any:
            if self.down:
                raise StoreUnavailableError("store is down")
            return attr(*args, **kwargs)

        return call


@pytest.fixture
def pydantic_settings_dict() -> dict[str, Any]:
    """Example Pydantic settings dict (snake_case keys)."""
    return {
        "node_name": "node-a",
        "node_address": "10.0.0.11:8080",
        "heartbeat_interval": 2.0,
        "failover_delay": 30.0,
        "store_type": "sqlite",
        "store_path": "/var/lib/ha/ha.db",
        "metrics_enabled": True,
        "metrics_prefix": "svc_ha",
        "peers": ["http://10.0.0.12:8080"],
    }


@pytest.fixture
def clock() -> FakeTimeProvider:
    return FakeTimeProvider(start=1000.0)


@pytest.fixture
def store(clock: FakeTimeProvider) -> OutageStore:
    return OutageStore(InMemoryLeaseStore(time_provider=clock, failover_delay=60.0))


@pytest.fixture
def runtime(store: OutageStore, clock: FakeTimeProvider) -> ArbiterRuntime:
    return build_runtime(
        ArbiterSettings(node_name="node-a", node_address="10.0.0.11:8080"),
        store=store,  # type: ignore[arg-type]
        metrics=FakeMetricsAdapter(),
        time_provider=clock,
    )


@pytest.fixture
def active_runtime(runtime: ArbiterRuntime) -> ArbiterRuntime:
    """Runtime whose node registered and won the lease."""
    runtime.registry.register()
    runtime.loop.tick()
    return runtime


@pytest.fixture
def client(runtime: ArbiterRuntime) -> TestClient:
    return TestClient(create_app(runtime))
