"""FailoverCoordinator use case for tracking the local role and its transitions."""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING

from ha_arbiter.adapters.ports import EventEmitterPort, LoggingPort, StdlibLoggingAdapter
from ha_arbiter.domain.cluster import ClusterNodeState
from ha_arbiter.domain.events import FailoverEvent, FailoverEventType

if TYPE_CHECKING:
    from ha_arbiter.adapters.metrics_port import MetricsPort
    from ha_arbiter.domain.lease import Lease


class NodeRole(Enum):
    """Enumeration of possible local roles.

    Attributes:
        ACTIVE: Node holds the active lease and runs the workload.
        STANDBY: Node waits to take over.
    """

    ACTIVE = "active"
    STANDBY = "standby"


class FailoverCoordinator:
    """Coordinates role transitions of this node.

    Holds the local view of the node: its role, the lease it holds, whether
    it is healthy, and when it last reached the store. Every transition is
    idempotent: promoting an active node or demoting a standby node changes
    nothing and emits no event.

    Dependencies:
        - EventEmitterPort (optional): Receives FailoverEvent on transitions.
        - MetricsPort (optional): Receives role and term gauges.
        - LoggingPort (optional): Receives transition messages.

    Thread safety:
        All state is guarded by an internal lock so request handlers can
        read it while the heartbeat thread updates it.
    """

    def __init__(
        self,
        node_name: str,
        event_emitter: EventEmitterPort | None = None,
        metrics: MetricsPort | None = None,
        logger: LoggingPort | None = None,
    ) -> None:
        """Initialize the coordinator in STANDBY, healthy and store-reachable."""
        self.node_name = node_name
        self._event_emitter = event_emitter
        self._metrics = metrics
        self._logger = logger or StdlibLoggingAdapter()
        self._lock = threading.RLock()
        self._role = NodeRole.STANDBY
        self._lease: Lease | None = None
        self._healthy = True
        self._store_reachable = True
        self._last_store_contact: float | None = None

        if self._metrics is not None:
            self._metrics.set_node_role(False)

    @property
    def role(self) -> NodeRole:
        with self._lock:
            return self._role

    @property
    def lease(self) -> Lease | None:
        with self._lock:
            return self._lease

    @property
    def is_active(self) -> bool:
        return self.role == NodeRole.ACTIVE

    def promote(self, lease: Lease, reason: str | None = None) -> bool:
        """Become ACTIVE with the given lease.

        Returns:
            True if the role changed, False if the node was already active.
        """
        with self._lock:
            self._lease = lease
            if self._role == NodeRole.ACTIVE:
                return False
            self._role = NodeRole.ACTIVE

        self._logger.info(
            f"HA node {self.node_name!r} is now active (lease term {lease.term})"
        )
        if self._metrics is not None:
            self._metrics.set_node_role(True)
            self._metrics.set_lease_term(lease.term)
        self._emit(FailoverEventType.PROMOTED_TO_ACTIVE, reason, lease.term)
        return True

    def cluster_node_state(self) -> ClusterNodeState:
        """Report this node the way peers see it in a ClusterState."""
        with self._lock:
            return ClusterNodeState(
                node_name=self.node_name,
                is_active=self._role == NodeRole.ACTIVE,
                term=self._lease.term if self._lease is not None else None,
            )

    def update_lease(self, lease: Lease) -> None:
        with self._lock:
            self._lease = lease

    def demote(
        self,
        event_type: FailoverEventType = FailoverEventType.DEMOTED_TO_STANDBY,
        reason: str | None = None,
    ) -> bool:
        """Become STANDBY.

        Args:
            event_type: Event describing why the node stepped down.
            reason: Optional human-readable reason.

        Returns:
            True if the role changed, False if the node was already standby.
        """
        with self._lock:
            if self._role == NodeRole.STANDBY:
                return False
            term = self._lease.term if self._lease is not None else None
            self._role = NodeRole.STANDBY
            self._lease = None

        self._logger.warning(
            f"HA node {self.node_name!r} stepped down to standby: "
            f"{event_type.value}{f' ({reason})' if reason else ''}"
        )
        if self._metrics is not None:
            self._metrics.set_node_role(False)
        self._emit(event_type, reason, term)
        return True

    def emit(
        self,
        event_type: FailoverEventType,
        node_name: str,
        reason: str | None = None,
    ) -> None:
        """Emit an event about another node (e.g. NODE_UNAVAILABLE)."""
        if self._event_emitter is not None:
            self._event_emitter.emit(
                FailoverEvent(event_type=event_type, node_name=node_name, reason=reason)
            )

    def _emit(
        self,
        event_type: FailoverEventType,
        reason: str | None,
        term: int | None,
    ) -> None:
        if self._event_emitter is not None:
            self._event_emitter.emit(
                FailoverEvent(
                    event_type=event_type,
                    node_name=self.node_name,
                    reason=reason,
                    term=term,
                )
            )

    def mark_healthy(self) -> None:
        """Mark this node as healthy.

        A healthy node may become active and keep its lease.
        """
        with self._lock:
            self._healthy = True

    def mark_unhealthy(self) -> None:
        """Mark this node as unhealthy.

        An unhealthy node cannot become active; an active one gives its lease
        up at the next heartbeat.
        """
        with self._lock:
            self._healthy = False

    def is_healthy(self) -> bool:
        with self._lock:
            return self._healthy

    def mark_store_reachable(self, now: float) -> None:
        """Record a successful store round trip at local time now."""
        with self._lock:
            self._store_reachable = True
            self._last_store_contact = now

    def mark_store_unreachable(self) -> None:
        with self._lock:
            self._store_reachable = False

    @property
    def store_reachable(self) -> bool:
        with self._lock:
            return self._store_reachable

    @property
    def last_store_contact(self) -> float | None:
        with self._lock:
            return self._last_store_contact

    def can_become_active(self) -> bool:
        """Check if this node may try to acquire the lease."""
        with self._lock:
            return self._healthy and self._store_reachable

    def should_self_fence(
        self, now: float, failover_delay: float, margin: float = 0.0
    ) -> bool:
        """Check if an active node must step down for lack of store contact.

        The held lease expires ``lease.ttl`` seconds after its last renewal,
        and a standby may take it over from that moment. Renewals keep the
        TTL the lease was granted with, so the shorter of the lease TTL and
        the current failover delay bounds how long the role may be kept.

        Args:
            now: Local clock reading.
            failover_delay: Last known cluster failover delay.
            margin: Time until the next check. The node fences now if the
                lease could expire before then.
        """
        with self._lock:
            if self._role != NodeRole.ACTIVE:
                return False
            if self._last_store_contact is None:
                return True
            ttl = failover_delay
            if self._lease is not None:
                ttl = min(ttl, self._lease.ttl)
            return now - self._last_store_contact + margin >= ttl
