"""Domain events for HA role transitions.

Events are immutable value objects representing state changes in the cluster.
They follow the frozen dataclass pattern used throughout the domain layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailoverEventType(Enum):
    """Types of failover events that can be emitted.

    Attributes:
        PROMOTED_TO_ACTIVE: Node acquired the lease and became active.
        DEMOTED_TO_STANDBY: Node stepped down for an unspecified reason.
        LEASE_LOST: The store rejected a renewal; another node may be active.
        STORE_UNREACHABLE_DEMOTION: Active node could not reach the store
            for longer than the failover delay and fenced itself.
        HEALTH_DEMOTION: Node demoted because it was marked unhealthy.
        GRACEFUL_HANDOFF: Node released the lease on shutdown.
        NODE_UNAVAILABLE: A peer missed heartbeats past the failover delay.
        NODE_REMOVED: An operator removed a node from the registry.
    """

    PROMOTED_TO_ACTIVE = "promoted_to_active"
    DEMOTED_TO_STANDBY = "demoted_to_standby"
    LEASE_LOST = "lease_lost"
    STORE_UNREACHABLE_DEMOTION = "store_unreachable_demotion"
    HEALTH_DEMOTION = "health_demotion"
    GRACEFUL_HANDOFF = "graceful_handoff"
    NODE_UNAVAILABLE = "node_unavailable"
    NODE_REMOVED = "node_removed"


@dataclass(frozen=True)
class FailoverEvent:
    """Immutable event representing a failover state transition.

    Attributes:
        event_type: The type of failover event that occurred.
        node_name: Node the event is about.
        reason: Optional human-readable reason for the event.
        term: Lease term involved, when there is one.
    """

    event_type: FailoverEventType
    node_name: str
    reason: str | None = None
    term: int | None = None
