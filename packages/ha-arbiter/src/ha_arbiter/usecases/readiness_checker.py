"""ReadinessChecker use case for determining node readiness.

Checks whether a node is ready to accept traffic by composing
health status, the local role, and split-brain detection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ha_arbiter.domain.health import HealthStatus, ReadinessResult

if TYPE_CHECKING:
    from ha_arbiter.usecases.split_brain_detector import SplitBrainStatus


class HealthCheckerProtocol(Protocol):
    """Protocol for health checking."""

    def check_health(self) -> HealthStatus:
        """Check current health status."""
        ...


class FailoverCoordinatorProtocol(Protocol):
    """Protocol for the local role."""

    @property
    def is_active(self) -> bool:
        """True if this node holds the active lease."""
        ...


class SplitBrainDetectorProtocol(Protocol):
    """Protocol for split brain detection."""

    def detect_split_brain(self) -> SplitBrainStatus:
        """Detect split brain condition."""
        ...


class ReadinessChecker:
    """Checks whether a node is ready to accept traffic.

    A node is ready when:
    - Health status is "healthy" (not degraded or unhealthy)
    - No split brain is detected (if a detector is provided)

    The result also tells whether the node can accept writes, i.e. whether
    it is the active node.

    Dependencies:
        - HealthChecker: Node health status
        - FailoverCoordinator: ACTIVE/STANDBY role
        - SplitBrainDetector (optional): Multiple active nodes
    """

    def __init__(
        self,
        health_checker: HealthCheckerProtocol,
        failover_coordinator: FailoverCoordinatorProtocol,
        split_brain_detector: SplitBrainDetectorProtocol | None = None,
    ) -> None:
        self._health_checker = health_checker
        self._failover_coordinator = failover_coordinator
        self._split_brain_detector = split_brain_detector

    def check_readiness(self) -> ReadinessResult:
        """Check if this node is ready to accept traffic.

        Returns:
            ReadinessResult with the readiness flag, write capability,
            health status, split-brain flag and the active node names.
        """
        health_status = self._health_checker.check_health()
        can_accept_writes = self._failover_coordinator.is_active

        split_brain_detected = False
        active_node_names: tuple[str, ...] = ()

        if self._split_brain_detector is not None:
            status = self._split_brain_detector.detect_split_brain()
            split_brain_detected = status.is_split_brain
            active_node_names = tuple(node.node_name for node in status.active_nodes)

        error: str | None = None
        if health_status.state != "healthy":
            error = f"Node is {health_status.state}"
        elif split_brain_detected:
            error = f"Split brain detected: multiple active nodes {active_node_names}"

        return ReadinessResult(
            is_ready=error is None,
            can_accept_writes=can_accept_writes,
            health_status=health_status,
            split_brain_detected=split_brain_detected,
            active_node_names=active_node_names,
            error=error,
        )
