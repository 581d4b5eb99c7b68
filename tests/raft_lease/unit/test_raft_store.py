"""Unit tests for RaftLeaseStore over a stand-in replicated table.

The stand-in applies commands to a LeaseTable immediately, the way a
single-node Raft group would, and can be switched to fail commits.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

pysyncobj = pytest.importorskip("pysyncobj")

from ha_arbiter.adapters.fakes import FakeTimeProvider  # noqa: E402
from ha_arbiter.adapters.ports import LeaseStorePort  # noqa: E402
from ha_arbiter.domain.exceptions import StoreUnavailableError  # noqa: E402
from ha_arbiter.domain.node import NodeRemoval, NodeStatus  # noqa: E402
from ha_arbiter.domain.settings import RaftStoreConfig  # noqa: E402
from raft_lease import LeaseTable, RaftLeaseStore  # noqa: E402
from raft_lease import raft_store  # noqa: E402


class CommittedTable:
    """Replicated table stand-in that commits every command at once."""

    def __init__(self) -> None:
        self.table = LeaseTable()
        self.no_quorum = False
        self.timeouts: list[float] = []

    def _apply(self, command: str, *args: Any, sync: bool, timeout: float) -> Any:
        assert sync is True
        self.timeouts.append(timeout)
        if self.no_quorum:
            raise pysyncobj.SyncObjException("timeout")
        return getattr(self.table, command)(*args)

    def __getattr__(self, command: str) -> Any:
        if command in (
            "upsert_node",
            "register_node",
            "delete_node_if_not_holder",
            "acquire",
            "renew",
            "release",
            "set_failover_delay",
        ):
            return lambda *args, **kwargs: self._apply(command, *args, **kwargs)
        raise AttributeError(command)

    def get_node(self, name: str):
        return self.table.nodes.get(name)

    def list_nodes(self):
        return self.table.list_nodes()

    def get_lease(self):
        return self.table.lease

    def get_failover_delay(self):
        return self.table.failover_delay


@pytest.fixture
def clock() -> FakeTimeProvider:
    return FakeTimeProvider(start=1000.0)


@pytest.fixture
def table() -> CommittedTable:
    return CommittedTable()


@pytest.fixture
def raft(table: CommittedTable, clock: FakeTimeProvider) -> RaftLeaseStore:
    return RaftLeaseStore(table, time_provider=clock, commit_timeout=2.0)


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.RaftLeaseStore")
class TestRaftLeaseStore:
    def test_implements_port(self, raft: RaftLeaseStore) -> None:
        assert isinstance(raft, LeaseStorePort)

    def test_commit_timeout_must_be_positive(self, table: CommittedTable) -> None:
        with pytest.raises(ValueError, match="commit_timeout must be > 0"):
            RaftLeaseStore(table, commit_timeout=0)

    def test_lease_uses_local_clock(
        self, raft: RaftLeaseStore, table: CommittedTable, clock: FakeTimeProvider
    ) -> None:
        lease = raft.acquire_lease("node-a", 60.0)
        assert lease is not None and lease.acquired_at == 1000.0
        assert table.timeouts == [2.0]

        clock.advance(30.0)
        assert raft.acquire_lease("node-b", 60.0) is None
        renewed = raft.renew_lease("node-a", 1)
        assert renewed is not None and renewed.renewed_at == 1030.0
        assert raft.get_lease() == renewed

    def test_release_and_reacquire(self, raft: RaftLeaseStore) -> None:
        raft.acquire_lease("node-a", 60.0)
        assert raft.release_lease("node-a", 1) is True
        assert raft.get_lease() is None
        lease = raft.acquire_lease("node-b", 60.0)
        assert lease is not None and lease.term == 2

    def test_node_records(self, raft: RaftLeaseStore, record_factory) -> None:
        raft.upsert_node(record_factory("node-b"))
        raft.upsert_node(record_factory("node-a", NodeStatus.ACTIVE))
        assert raft.get_node("node-a").status == NodeStatus.ACTIVE
        assert [n.name for n in raft.list_nodes()] == ["node-a", "node-b"]
        claim = replace(record_factory("node-b", last_seen=1010.0), session_id="other")
        assert raft.register_node(claim) is False
        assert raft.delete_node_if_not_holder("node-b") == NodeRemoval.REMOVED
        assert raft.delete_node_if_not_holder("node-b") == NodeRemoval.NOT_FOUND
        assert raft.register_node(claim) is True

    def test_failover_delay_defaults_until_set(self, table: CommittedTable) -> None:
        store = RaftLeaseStore(table, failover_delay=45.0)
        assert store.get_failover_delay() == 45.0
        store.set_failover_delay(300.0)
        assert store.get_failover_delay() == 300.0

    def test_uncommitted_write_raises_store_unavailable(
        self, raft: RaftLeaseStore, table: CommittedTable
    ) -> None:
        table.no_quorum = True
        with pytest.raises(StoreUnavailableError, match="Raft command acquire did not commit") as exc_info:
            raft.acquire_lease("node-a", 60.0)
        assert isinstance(exc_info.value.original_error, pysyncobj.SyncObjException)

    def test_reads_served_without_quorum(
        self, raft: RaftLeaseStore, table: CommittedTable
    ) -> None:
        raft.acquire_lease("node-a", 60.0)
        table.no_quorum = True
        assert raft.get_lease().holder == "node-a"


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.RaftLeaseStore")
class TestRaftLeaseStoreFromConfig:
    def test_starts_raft_node_and_destroys_on_close(self) -> None:
        config = RaftStoreConfig(
            self_addr="node1:20202", partners=("node2:20202", "node3:20202"), commit_timeout=3.0
        )
        sync_obj = MagicMock()
        with patch.object(raft_store, "create_sync_obj", return_value=sync_obj) as create:
            store = RaftLeaseStore.from_config(config, failover_delay=90.0)

        args, kwargs = create.call_args
        assert args[:2] == ("node1:20202", ["node2:20202", "node3:20202"])
        assert kwargs == {"journal_file": None}
        assert store.commit_timeout == 3.0
        assert store.get_failover_delay() == 90.0

        store.close()
        store.close()
        sync_obj.destroy.assert_called_once_with()
