"""Fake metrics adapter for testing.

Provides a test double for MetricsPort that records all metric updates
for assertion in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class MetricCall:
    """Record of a single metric update.

    Attributes:
        metric_name: Name of the metric that was updated.
        value: Value that was set.
    """

    metric_name: str
    value: float | int | bool | str | None


class FakeMetricsAdapter:
    """Fake implementation of MetricsPort for testing.

    Records all metric updates for later assertion.

    Example:
        >>> fake = FakeMetricsAdapter()
        >>> fake.set_node_role(True)
        >>> fake.current_node_role
        True
        >>> fake.calls
        [MetricCall(metric_name='node_role', value=True)]
    """

    def __init__(self) -> None:
        self._node_role: bool | None = None
        self._health_status: str | None = None
        self._split_brain_detected: bool | None = None
        self._lease_term: int | None = None
        self._nodes_unavailable: int | None = None
        self._failovers = 0
        self._calls: list[MetricCall] = []

    @property
    def calls(self) -> list[MetricCall]:
        """Return a copy of all metric update calls in order of invocation."""
        return list(self._calls)

    @property
    def current_node_role(self) -> bool | None:
        return self._node_role

    @property
    def current_health_status(self) -> str | None:
        return self._health_status

    @property
    def current_split_brain_detected(self) -> bool | None:
        return self._split_brain_detected

    @property
    def current_lease_term(self) -> int | None:
        return self._lease_term

    @property
    def current_nodes_unavailable(self) -> int | None:
        return self._nodes_unavailable

    @property
    def failovers(self) -> int:
        return self._failovers

    def set_node_role(self, is_active: bool) -> None:
        self._node_role = is_active
        self._calls.append(MetricCall("node_role", is_active))

    def set_health_status(
        self,
        status: Literal["healthy", "degraded", "unhealthy"],
    ) -> None:
        self._health_status = status
        self._calls.append(MetricCall("health_status", status))

    def set_split_brain_detected(self, detected: bool) -> None:
        self._split_brain_detected = detected
        self._calls.append(MetricCall("split_brain_detected", detected))

    def set_lease_term(self, term: int) -> None:
        self._lease_term = term
        self._calls.append(MetricCall("lease_term", term))

    def set_nodes_unavailable(self, count: int) -> None:
        self._nodes_unavailable = count
        self._calls.append(MetricCall("nodes_unavailable", count))

    def inc_failovers(self) -> None:
        self._failovers += 1
        self._calls.append(MetricCall("failovers", self._failovers))

    def clear_calls(self) -> None:
        """Clear the recorded calls list.

        Does not reset current_* state values.
        """
        self._calls.clear()
