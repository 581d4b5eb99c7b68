"""Health status domain value object."""

from dataclasses import dataclass
from typing import Literal

from ha_arbiter.domain.exceptions import HAConfigError


@dataclass(frozen=True)
class HealthStatus:
    """Health status value object.

    Represents the health state of an HA node with three possible states:
    - healthy: Node is operating normally
    - degraded: Node is running but cannot currently reach the store
    - unhealthy: Node has been marked unfit to be active

    Attributes:
        state: One of "healthy", "unhealthy", or "degraded".
    """

    state: Literal["healthy", "unhealthy", "degraded"]

    def __post_init__(self) -> None:
        """Validate health state after initialization."""
        valid_states = ("healthy", "unhealthy", "degraded")
        if self.state not in valid_states:
            raise HAConfigError(
                f"health state must be one of {valid_states}, got: {self.state!r}"
            )


@dataclass(frozen=True)
class LivenessResult:
    """Liveness probe result value object.

    Attributes:
        is_live: True if the heartbeat loop is running.
        error: Optional error message if the node is not live.
    """

    is_live: bool
    error: str | None = None


@dataclass(frozen=True)
class ReadinessResult:
    """Readiness probe result value object.

    Attributes:
        is_ready: True if the node is ready to accept traffic.
        can_accept_writes: True if the node holds the active lease.
        health_status: The overall health status of the node.
        split_brain_detected: True if multiple active nodes are detected.
        active_node_names: Tuple of node names claiming to be active.
        error: Optional error message if the node is not ready.
    """

    is_ready: bool
    can_accept_writes: bool
    health_status: HealthStatus
    split_brain_detected: bool
    active_node_names: tuple[str, ...]
    error: str | None = None
