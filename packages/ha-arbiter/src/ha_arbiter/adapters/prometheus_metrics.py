"""Prometheus metrics adapter for the HA arbiter.

Implements MetricsPort using the prometheus-client library. The import is
deferred to construction so nodes running without metrics never touch the
default registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry, Counter, Gauge


class PrometheusMetricsAdapter:
    """Prometheus implementation of MetricsPort.

    All metric names use a configurable prefix (default 'ha_arbiter_').

    Example:
        >>> adapter = PrometheusMetricsAdapter(prefix="zabbix_ha")
        >>> adapter.set_node_role(True)  # Sets zabbix_ha_node_role to 1
    """

    def __init__(
        self,
        prefix: str = "ha_arbiter",
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize Prometheus gauges.

        Args:
            prefix: Metric name prefix. Defaults to "ha_arbiter".
            registry: Registry to register metrics in. Defaults to the
                     process-wide default registry.
        """
        from prometheus_client import REGISTRY, Counter, Gauge

        target = registry if registry is not None else REGISTRY

        self._node_role: Gauge = Gauge(
            f"{prefix}_node_role",
            "Current node role: 1=ACTIVE, 0=STANDBY",
            registry=target,
        )
        self._health_status: Gauge = Gauge(
            f"{prefix}_health_status",
            "Health status: 1.0=healthy, 0.5=degraded, 0.0=unhealthy",
            registry=target,
        )
        self._split_brain_detected: Gauge = Gauge(
            f"{prefix}_split_brain_detected",
            "Split-brain detected: 1=yes, 0=no",
            registry=target,
        )
        self._lease_term: Gauge = Gauge(
            f"{prefix}_lease_term",
            "Term of the active lease last seen by this node",
            registry=target,
        )
        self._nodes_unavailable: Gauge = Gauge(
            f"{prefix}_nodes_unavailable",
            "Number of nodes marked unavailable",
            registry=target,
        )
        self._failovers: Counter = Counter(
            f"{prefix}_failovers",
            "Promotions of this node that replaced a dead or missing holder",
            registry=target,
        )

    def set_node_role(self, is_active: bool) -> None:
        self._node_role.set(1 if is_active else 0)

    def set_health_status(
        self,
        status: Literal["healthy", "degraded", "unhealthy"],
    ) -> None:
        """Set health status gauge.

        Args:
            status: Health status string. Maps to numeric value:
                   - healthy: 1.0
                   - degraded: 0.5
                   - unhealthy: 0.0
        """
        status_values = {
            "healthy": 1.0,
            "degraded": 0.5,
            "unhealthy": 0.0,
        }
        self._health_status.set(status_values.get(status, 0.0))

    def set_split_brain_detected(self, detected: bool) -> None:
        self._split_brain_detected.set(1 if detected else 0)

    def set_lease_term(self, term: int) -> None:
        self._lease_term.set(term)

    def set_nodes_unavailable(self, count: int) -> None:
        self._nodes_unavailable.set(count)

    def inc_failovers(self) -> None:
        self._failovers.inc()
