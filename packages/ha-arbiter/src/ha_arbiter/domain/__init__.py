"""Domain layer: Entities with zero external dependencies."""

from ha_arbiter.domain.cluster import ClusterNodeState, ClusterState
from ha_arbiter.domain.events import FailoverEvent, FailoverEventType
from ha_arbiter.domain.exceptions import (
    HAArbiterError,
    HAConfigError,
    LeaseLostError,
    NodeAlreadyRunningError,
    NodeNotFoundError,
    NodeRemovalError,
    StoreUnavailableError,
)
from ha_arbiter.domain.health import HealthStatus
from ha_arbiter.domain.lease import Lease
from ha_arbiter.domain.node import NodeRecord, NodeRemoval, NodeStatus
from ha_arbiter.domain.settings import (
    ArbiterSettings,
    HTTPSettings,
    MetricsSettings,
    RaftStoreConfig,
    StoreSettings,
)

__all__ = [
    "ArbiterSettings",
    "ClusterNodeState",
    "ClusterState",
    "FailoverEvent",
    "FailoverEventType",
    "HAArbiterError",
    "HAConfigError",
    "HealthStatus",
    "HTTPSettings",
    "Lease",
    "LeaseLostError",
    "MetricsSettings",
    "NodeAlreadyRunningError",
    "NodeNotFoundError",
    "NodeRecord",
    "NodeRemoval",
    "NodeRemovalError",
    "NodeStatus",
    "RaftStoreConfig",
    "StoreSettings",
    "StoreUnavailableError",
]
