"""Use cases: Application logic layer."""

from ha_arbiter.usecases.config_parser import ConfigParser
from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator, NodeRole
from ha_arbiter.usecases.failover_detector import FailoverDecision, FailoverDetector
from ha_arbiter.usecases.health_checker import HealthChecker
from ha_arbiter.usecases.heartbeat_loop import HeartbeatLoop
from ha_arbiter.usecases.lease_manager import LeaseManager
from ha_arbiter.usecases.liveness_checker import LivenessChecker
from ha_arbiter.usecases.node_registry import NodeRegistry
from ha_arbiter.usecases.readiness_checker import ReadinessChecker
from ha_arbiter.usecases.split_brain_detector import SplitBrainDetector, SplitBrainStatus

__all__ = [
    "ConfigParser",
    "FailoverCoordinator",
    "FailoverDecision",
    "FailoverDetector",
    "HealthChecker",
    "HeartbeatLoop",
    "LeaseManager",
    "LivenessChecker",
    "NodeRegistry",
    "NodeRole",
    "ReadinessChecker",
    "SplitBrainDetector",
    "SplitBrainStatus",
]
