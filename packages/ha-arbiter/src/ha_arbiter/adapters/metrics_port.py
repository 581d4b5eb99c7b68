"""Port interface and no-op implementation for metrics collection.

Metrics ports follow fire-and-forget semantics: implementations may
buffer, sample, or drop metrics as needed. No exceptions should propagate.
"""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable


@runtime_checkable
class MetricsPort(Protocol):
    """Port interface for metrics collection.

    Contract:
        - All methods are fire-and-forget (no return value, no exceptions)
        - set_* methods update gauges, inc_* methods increment counters
        - Implementations may no-op if metrics are disabled
    """

    def set_node_role(self, is_active: bool) -> None:
        """Set the node role gauge (1 = active, 0 = standby)."""
        ...

    def set_health_status(
        self,
        status: Literal["healthy", "degraded", "unhealthy"],
    ) -> None:
        """Set the health status gauge.

        Args:
            status: Health status. Maps to:
                   - healthy: 1.0
                   - degraded: 0.5
                   - unhealthy: 0.0
        """
        ...

    def set_split_brain_detected(self, detected: bool) -> None:
        """Set the split-brain detection gauge."""
        ...

    def set_lease_term(self, term: int) -> None:
        """Set the gauge for the lease term last seen by this node."""
        ...

    def set_nodes_unavailable(self, count: int) -> None:
        """Set the gauge for the number of unavailable nodes."""
        ...

    def inc_failovers(self) -> None:
        """Count a promotion that replaced a dead or missing holder."""
        ...


class NoOpMetricsAdapter:
    """No-operation metrics adapter for when metrics are disabled.

    All methods are no-ops. This allows use cases to unconditionally
    call metrics methods without checking if metrics are enabled.
    """

    def set_node_role(self, is_active: bool) -> None:
        pass

    def set_health_status(
        self,
        status: Literal["healthy", "degraded", "unhealthy"],
    ) -> None:
        pass

    def set_split_brain_detected(self, detected: bool) -> None:
        pass

    def set_lease_term(self, term: int) -> None:
        pass

    def set_nodes_unavailable(self, count: int) -> None:
        pass

    def inc_failovers(self) -> None:
        pass
