"""Node registry domain value objects."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from ha_arbiter.domain.exceptions import HAConfigError

if TYPE_CHECKING:
    from ha_arbiter.domain.lease import Lease


class NodeStatus(Enum):
    """Registry status of an HA node.

    Attributes:
        STANDBY: Node is running and ready to take over.
        STOPPED: Node shut down gracefully.
        UNAVAILABLE: Node missed heartbeats for longer than the failover delay.
        ACTIVE: Node holds the active lease.
    """

    STANDBY = "standby"
    STOPPED = "stopped"
    UNAVAILABLE = "unavailable"
    ACTIVE = "active"

    @property
    def is_running(self) -> bool:
        """True for statuses that belong to a process still heartbeating."""
        return self in (NodeStatus.STANDBY, NodeStatus.ACTIVE)


def validate_node_name(name: str, field_name: str = "node name") -> None:
    """Validate a node name.

    Raises:
        HAConfigError: If the name is empty, padded, or has control characters.
    """
    if not name:
        raise HAConfigError(f"{field_name} cannot be empty")

    if any(ord(c) < 32 or c == "\x7f" for c in name):
        raise HAConfigError(f"{field_name} contains control characters, got: {name!r}")

    if not name.strip():
        raise HAConfigError(f"{field_name} cannot be whitespace-only")

    if name != name.strip():
        raise HAConfigError(
            f"{field_name} cannot have leading/trailing whitespace, got: {name!r}"
        )


@dataclass(frozen=True)
class NodeRecord:
    """A candidate server identity and its last heartbeat.

    Attributes:
        name: Unique node name within the cluster.
        address: Address the node serves on (informational).
        status: Current registry status.
        last_seen: Store clock reading of the last heartbeat, in seconds.
        session_id: Token identifying the process that owns this record.
    """

    name: str
    address: str
    status: NodeStatus
    last_seen: float
    session_id: str

    def __post_init__(self) -> None:
        validate_node_name(self.name)

    def with_heartbeat(self, now: float) -> NodeRecord:
        return replace(self, last_seen=now)

    def with_status(self, status: NodeStatus) -> NodeRecord:
        return replace(self, status=status)

    def seconds_since_seen(self, now: float) -> float:
        return max(0.0, now - self.last_seen)

    def missed_heartbeats(self, now: float, heartbeat_interval: float) -> int:
        """Count whole heartbeat periods elapsed since the last heartbeat."""
        return int(math.floor(self.seconds_since_seen(now) / heartbeat_interval))

    def is_stale(self, now: float, failover_delay: float) -> bool:
        """Check if the node has been silent for longer than the failover delay."""
        return now - self.last_seen > failover_delay


def node_summary(record: NodeRecord, now: float) -> dict[str, Any]:
    """JSON-friendly view of record; lastaccess_age is measured at store time now."""
    return {
        "name": record.name,
        "address": record.address,
        "status": record.status.value,
        "last_seen": record.last_seen,
        "lastaccess_age": round(record.seconds_since_seen(now), 3),
    }


class NodeRemoval(Enum):
    """Outcome of an administrative node removal."""

    REMOVED = "removed"
    NOT_FOUND = "not_found"
    HOLDS_LEASE = "holds_lease"


def can_register(
    existing: NodeRecord | None, record: NodeRecord, failover_delay: float
) -> bool:
    """Check if record may take the name held by existing.

    A record of another session keeps the name while it is running and has
    heartbeated within the failover delay, measured at ``record.last_seen``.
    """
    if existing is None or existing.session_id == record.session_id:
        return True
    return not existing.status.is_running or existing.is_stale(
        record.last_seen, failover_delay
    )


def removal_outcome(
    existing: NodeRecord | None, lease: Lease | None, now: float
) -> NodeRemoval:
    """Decide whether a node may be deleted: never while it holds a live lease."""
    if existing is None:
        return NodeRemoval.NOT_FOUND
    if lease is not None and lease.holder == existing.name and not lease.is_expired(now):
        return NodeRemoval.HOLDS_LEASE
    return NodeRemoval.REMOVED
