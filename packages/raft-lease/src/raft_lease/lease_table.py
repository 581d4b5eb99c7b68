"""Deterministic lease state machine replicated by Raft.

Every replica applies the same commands in the same order, so every method
must produce the same result from the same arguments on every host. Nothing
here reads a clock: the caller's reading travels in the command.
"""

from __future__ import annotations

from ha_arbiter.domain.lease import Lease, grant_lease, release_lease, renew_lease
from ha_arbiter.domain.node import (
    NodeRecord,
    NodeRemoval,
    can_register,
    removal_outcome,
)


class LeaseTable:
    """Node records, the active lease and the failover delay.

    Attributes:
        nodes: Node records by name.
        lease: Current lease, or None after a release.
        last_term: Highest term ever granted, kept across releases.
        failover_delay: Delay set by an operator, or None until one is set.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, NodeRecord] = {}
        self.lease: Lease | None = None
        self.last_term = 0
        self.failover_delay: float | None = None

    def upsert_node(self, record: NodeRecord) -> None:
        self.nodes[record.name] = record

    def register_node(self, record: NodeRecord, default_failover_delay: float) -> bool:
        delay = self.failover_delay
        if delay is None:
            delay = default_failover_delay
        if not can_register(self.nodes.get(record.name), record, delay):
            return False
        self.nodes[record.name] = record
        return True

    def delete_node_if_not_holder(self, name: str, now: float) -> NodeRemoval:
        outcome = removal_outcome(self.nodes.get(name), self.lease, now)
        if outcome == NodeRemoval.REMOVED:
            del self.nodes[name]
        return outcome

    def list_nodes(self) -> list[NodeRecord]:
        return [self.nodes[name] for name in sorted(self.nodes)]

    def acquire(self, candidate: str, ttl: float, now: float) -> Lease | None:
        granted = grant_lease(self.lease, candidate, now, ttl, self.last_term)
        if granted is not None:
            self.lease = granted
            self.last_term = max(self.last_term, granted.term)
        return granted

    def renew(self, holder: str, term: int, now: float) -> Lease | None:
        renewed = renew_lease(self.lease, holder, term, now)
        if renewed is not None:
            self.lease = renewed
        return renewed

    def release(self, holder: str, term: int) -> bool:
        remaining = release_lease(self.lease, holder, term)
        released = remaining is None and self.lease is not None
        self.lease = remaining
        return released

    def set_failover_delay(self, seconds: float) -> None:
        self.failover_delay = seconds
