"""Health checker use case for determining node health."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ha_arbiter.domain.health import HealthStatus

if TYPE_CHECKING:
    from ha_arbiter.adapters.metrics_port import MetricsPort
    from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator


class HealthChecker:
    """Determines the health status of an HA node.

    Health follows a priority hierarchy:
    1. unhealthy: the node was marked unfit to be active
    2. degraded: the node cannot currently reach the store
    3. healthy

    The health flag and store reachability both live on the
    FailoverCoordinator, which the heartbeat loop keeps current.
    """

    def __init__(
        self,
        coordinator: FailoverCoordinator,
        metrics: MetricsPort | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._metrics = metrics

    def check_health(self) -> HealthStatus:
        if not self._coordinator.is_healthy():
            state = "unhealthy"
        elif not self._coordinator.store_reachable:
            state = "degraded"
        else:
            state = "healthy"

        if self._metrics is not None:
            self._metrics.set_health_status(state)  # type: ignore[arg-type]

        return HealthStatus(state=state)  # type: ignore[arg-type]
