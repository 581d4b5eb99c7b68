"""In-process implementation of LeaseStorePort.

All state lives in one object guarded by one lock, which makes every
operation atomic for all coordinators sharing the instance. Useful for tests
and for running several nodes inside a single process.
"""

from __future__ import annotations

import threading

from ha_arbiter.adapters.ports import LeaseStorePort, RealTimeProvider, TimeProvider
from ha_arbiter.domain.lease import (
    DEFAULT_FAILOVER_DELAY,
    Lease,
    grant_lease,
    release_lease,
    renew_lease,
)
from ha_arbiter.domain.node import (
    NodeRecord,
    NodeRemoval,
    can_register,
    removal_outcome,
)


class InMemoryLeaseStore:
    """Thread-safe in-memory consistency store.

    Thread safety:
        A single lock serializes every read and write.
    """

    def __init__(
        self,
        time_provider: TimeProvider | None = None,
        failover_delay: float = DEFAULT_FAILOVER_DELAY,
    ) -> None:
        self._time = time_provider or RealTimeProvider()
        self._lock = threading.Lock()
        self._nodes: dict[str, NodeRecord] = {}
        self._lease: Lease | None = None
        self._last_term = 0
        self._failover_delay = failover_delay

    def now(self) -> float:
        return self._time.get_time_seconds()

    def upsert_node(self, record: NodeRecord) -> None:
        with self._lock:
            self._nodes[record.name] = record

    def get_node(self, name: str) -> NodeRecord | None:
        with self._lock:
            return self._nodes.get(name)

    def list_nodes(self) -> list[NodeRecord]:
        with self._lock:
            return [self._nodes[name] for name in sorted(self._nodes)]

    def register_node(self, record: NodeRecord) -> bool:
        with self._lock:
            existing = self._nodes.get(record.name)
            if not can_register(existing, record, self._failover_delay):
                return False
            self._nodes[record.name] = record
            return True

    def delete_node_if_not_holder(self, name: str) -> NodeRemoval:
        with self._lock:
            outcome = removal_outcome(self._nodes.get(name), self._lease, self.now())
            if outcome == NodeRemoval.REMOVED:
                del self._nodes[name]
            return outcome

    def acquire_lease(self, candidate: str, ttl: float) -> Lease | None:
        with self._lock:
            granted = grant_lease(
                self._lease, candidate, self.now(), ttl, self._last_term
            )
            if granted is not None:
                self._lease = granted
                self._last_term = max(self._last_term, granted.term)
            return granted

    def renew_lease(self, holder: str, term: int) -> Lease | None:
        with self._lock:
            renewed = renew_lease(self._lease, holder, term, self.now())
            if renewed is not None:
                self._lease = renewed
            return renewed

    def release_lease(self, holder: str, term: int) -> bool:
        with self._lock:
            remaining = release_lease(self._lease, holder, term)
            released = remaining is None and self._lease is not None
            self._lease = remaining
            return released

    def get_lease(self) -> Lease | None:
        with self._lock:
            return self._lease

    def get_failover_delay(self) -> float:
        with self._lock:
            return self._failover_delay

    def set_failover_delay(self, seconds: float) -> None:
        with self._lock:
            self._failover_delay = seconds


# Runtime protocol check
assert isinstance(InMemoryLeaseStore(), LeaseStorePort)
