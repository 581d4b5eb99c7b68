"""Internal PySyncObj wrappers for the replicated lease table."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from pysyncobj import SyncObj, SyncObjConf, SyncObjConsumer, replicated

from raft_lease.lease_table import LeaseTable

if TYPE_CHECKING:
    from ha_arbiter.domain.lease import Lease
    from ha_arbiter.domain.node import NodeRecord, NodeRemoval


class ReplicatedLeaseTable(SyncObjConsumer):
    """SyncObj consumer applying committed commands to a LeaseTable.

    Mutating methods are ``@replicated``: calling one appends a command to
    the Raft log, and every replica runs the method body once the command
    commits. Call them with ``sync=True`` to wait for the result.

    Read methods serve the local replica, which may lag the leader by the
    entries not yet applied here.
    """

    def __init__(self) -> None:
        # Set before SyncObjConsumer.__init__ so it is not serialized.
        self._lock = threading.RLock()
        super().__init__()
        self._table = LeaseTable()

    @replicated
    def upsert_node(self, record: NodeRecord) -> None:
        with self._lock:
            self._table.upsert_node(record)

    @replicated
    def register_node(self, record: NodeRecord, default_failover_delay: float) -> bool:
        with self._lock:
            return self._table.register_node(record, default_failover_delay)

    @replicated
    def delete_node_if_not_holder(self, name: str, now: float) -> NodeRemoval:
        with self._lock:
            return self._table.delete_node_if_not_holder(name, now)

    @replicated
    def acquire(self, candidate: str, ttl: float, now: float) -> Lease | None:
        with self._lock:
            return self._table.acquire(candidate, ttl, now)

    @replicated
    def renew(self, holder: str, term: int, now: float) -> Lease | None:
        with self._lock:
            return self._table.renew(holder, term, now)

    @replicated
    def release(self, holder: str, term: int) -> bool:
        with self._lock:
            return self._table.release(holder, term)

    @replicated
    def set_failover_delay(self, seconds: float) -> None:
        with self._lock:
            self._table.set_failover_delay(seconds)

    def get_node(self, name: str) -> NodeRecord | None:
        with self._lock:
            return self._table.nodes.get(name)

    def list_nodes(self) -> list[NodeRecord]:
        with self._lock:
            return self._table.list_nodes()

    def get_lease(self) -> Lease | None:
        with self._lock:
            return self._table.lease

    def get_failover_delay(self) -> float | None:
        with self._lock:
            return self._table.failover_delay


def create_sync_obj(
    self_address: str,
    partners: list[str],
    table: ReplicatedLeaseTable,
    *,
    journal_file: str | None = None,
) -> SyncObj:
    """Start a Raft node replicating table.

    Args:
        self_address: This node's address in "host:port" format.
        partners: Partner node addresses in "host:port" format.
        table: Consumer receiving committed commands.
        journal_file: Optional file for a persistent Raft journal.
    """
    conf = SyncObjConf(
        autoTick=True,
        dynamicMembershipChange=False,
        commandsWaitLeader=True,
        journalFile=journal_file,
    )
    return SyncObj(self_address, partners, conf=conf, consumers=[table])
