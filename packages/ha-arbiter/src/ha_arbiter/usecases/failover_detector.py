"""FailoverDetector use case: declares silent nodes dead."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ha_arbiter.domain.exceptions import HAConfigError

if TYPE_CHECKING:
    from ha_arbiter.domain.lease import Lease
    from ha_arbiter.domain.node import NodeRecord


@dataclass(frozen=True)
class FailoverDecision:
    """Result of evaluating the active lease.

    Attributes:
        should_elect: True if no node holds a live lease and an election
            should run.
        dead_holder: Name of the holder whose lease expired, if any.
        reason: Human-readable explanation.
    """

    should_elect: bool
    dead_holder: str | None = None
    reason: str = ""


class FailoverDetector:
    """Declares the active node dead after it misses heartbeats.

    A lease is renewed on every heartbeat of its holder, so an expired lease
    means the holder missed every heartbeat of a whole failover delay. The
    same threshold applies to standby nodes in the registry.

    This is a stateless, pure logic component: all inputs come from the
    store and the caller's clock reading.
    """

    def __init__(self, heartbeat_interval: float) -> None:
        if heartbeat_interval <= 0:
            raise HAConfigError("heartbeat_interval must be > 0")
        self.heartbeat_interval = heartbeat_interval

    def missed_heartbeat_threshold(self, failover_delay: float) -> int:
        """Number of consecutive missed heartbeats after which a node is dead."""
        return math.ceil(failover_delay / self.heartbeat_interval)

    def evaluate(self, lease: Lease | None, now: float) -> FailoverDecision:
        """Decide whether an election should run.

        Args:
            lease: Current lease from the store, if any.
            now: Store clock reading.
        """
        if lease is None:
            return FailoverDecision(should_elect=True, reason="no lease holder")

        if not lease.is_expired(now):
            return FailoverDecision(should_elect=False)

        missed = math.floor((now - lease.renewed_at) / self.heartbeat_interval)
        return FailoverDecision(
            should_elect=True,
            dead_holder=lease.holder,
            reason=(
                f"active node {lease.holder!r} missed {missed} heartbeats "
                f"(lease term {lease.term} expired)"
            ),
        )

    def find_stale_nodes(
        self,
        records: Iterable[NodeRecord],
        now: float,
        failover_delay: float,
        exclude: Iterable[str] = (),
    ) -> list[str]:
        """Names of running nodes silent for longer than the failover delay.

        STOPPED and UNAVAILABLE nodes are never returned.
        """
        excluded = set(exclude)
        return [
            record.name
            for record in records
            if record.name not in excluded
            and record.status.is_running
            and record.is_stale(now, failover_delay)
        ]
