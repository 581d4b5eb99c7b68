"""Port interfaces for the HA arbiter core package.

Ports define the contracts that adapters must implement.
These are Protocol classes (structural subtyping) for flexible testing.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ha_arbiter.domain.cluster import ClusterNodeState, ClusterState
    from ha_arbiter.domain.events import FailoverEvent
    from ha_arbiter.domain.lease import Lease
    from ha_arbiter.domain.node import NodeRecord, NodeRemoval


@runtime_checkable
class LeaseStorePort(Protocol):
    """Port interface for the strongly-consistent coordination store.

    The store holds the node registry, the single active lease and the
    cluster-wide failover delay. It is the only state shared between nodes.

    Contract:
        - Every method is atomic with respect to every other caller of the
          same store, including callers in other processes or hosts.
        - now() is the clock all lease arithmetic uses.
        - Lease decisions follow ha_arbiter.domain.lease rules.
        - Connectivity failures raise StoreUnavailableError.
    """

    def now(self) -> float:
        """Return the store clock reading in seconds."""
        ...

    def upsert_node(self, record: NodeRecord) -> None:
        """Create or replace the record with the same name."""
        ...

    def get_node(self, name: str) -> NodeRecord | None:
        """Return the record for name, or None if unknown."""
        ...

    def list_nodes(self) -> list[NodeRecord]:
        """Return all records ordered by name."""
        ...

    def register_node(self, record: NodeRecord) -> bool:
        """Write record unless another live session holds its name.

        The check follows ha_arbiter.domain.node.can_register with the
        stored failover delay.

        Returns:
            True if the record was written.
        """
        ...

    def delete_node_if_not_holder(self, name: str) -> NodeRemoval:
        """Delete the record for name unless it holds an unexpired lease.

        Returns:
            The outcome from ha_arbiter.domain.node.removal_outcome.
        """
        ...

    def acquire_lease(self, candidate: str, ttl: float) -> Lease | None:
        """Grant the lease to candidate if no other node holds a live one.

        Returns:
            The granted lease, or None if another node holds it.
        """
        ...

    def renew_lease(self, holder: str, term: int) -> Lease | None:
        """Renew the lease held by holder with term.

        Returns:
            The renewed lease, or None if it expired or changed hands.
        """
        ...

    def release_lease(self, holder: str, term: int) -> bool:
        """Release the lease if holder still owns term.

        Returns:
            True if the lease was released.
        """
        ...

    def get_lease(self) -> Lease | None:
        """Return the current lease, expired or not, or None."""
        ...

    def get_failover_delay(self) -> float:
        """Return the cluster-wide failover delay in seconds."""
        ...

    def set_failover_delay(self, seconds: float) -> None:
        """Set the cluster-wide failover delay in seconds."""
        ...


@runtime_checkable
class ClusterStatePort(Protocol):
    """Port interface for split-brain detection.

    Implementations provide the set of nodes and which of them claim to be
    active, either from the shared registry or by asking each peer.

    Contract:
        - get_cluster_state() returns a ClusterState with at least one node
    """

    def get_cluster_state(self) -> ClusterState:
        """Get the current state of all nodes in the cluster."""
        ...


@runtime_checkable
class PeerStatusPort(Protocol):
    """Port interface for asking a peer node about its role.

    Contract:
        - fetch_status(url) returns the peer's self-reported state
        - network or decoding failures raise StoreUnavailableError
    """

    def fetch_status(self, url: str) -> ClusterNodeState:
        """Fetch the status a peer reports about itself.

        Args:
            url: Base URL of the peer (e.g., "http://10.0.0.12:8080").
        """
        ...


@runtime_checkable
class EventEmitterPort(Protocol):
    """Port interface for emitting failover events.

    Contract:
        - emit(event) delivers the event to all registered observers
        - emit() is fire-and-forget (no return value, no exceptions propagated)
    """

    def emit(self, event: FailoverEvent) -> None:
        """Emit a failover event to observers."""
        ...


@runtime_checkable
class LoggingPort(Protocol):
    """Port interface for structured logging.

    Abstracts the logging mechanism from use cases so tests can capture
    messages with a fake.

    Contract:
        - all methods are fire-and-forget
    """

    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class StdlibLoggingAdapter:
    """Default LoggingPort implementation backed by the logging module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("ha_arbiter")

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


@runtime_checkable
class TimeProvider(Protocol):
    """Port interface for time operations.

    Contract:
        - get_time_seconds() returns current Unix timestamp as float
        - Successive calls must return non-decreasing values
    """

    def get_time_seconds(self) -> float:
        """Return current Unix timestamp in seconds."""
        ...


class RealTimeProvider:
    """Default implementation: provides real system time."""

    def get_time_seconds(self) -> float:
        return time.time()
