"""pytest configuration for raft_lease tests."""

from __future__ import annotations

import pytest

from ha_arbiter.domain.node import NodeRecord, NodeStatus


def make_record(name: str, status: NodeStatus = NodeStatus.STANDBY, last_seen: float = 1000.0) -> NodeRecord:
    return NodeRecord(name, f"{name}:8080", status, last_seen, f"session-{name}")


@pytest.fixture
def record_factory():
    return make_record
