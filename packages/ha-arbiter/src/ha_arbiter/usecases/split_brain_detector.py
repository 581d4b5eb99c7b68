"""SplitBrainDetector use case for detecting multiple active nodes.

A split brain occurs when a partitioned active node keeps running on a lease
it can no longer renew while a standby has legitimately taken over. Both
then serve as active. This use case detects such scenarios by examining the
roles every reachable node reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ha_arbiter.adapters.ports import ClusterStatePort

if TYPE_CHECKING:
    from ha_arbiter.adapters.metrics_port import MetricsPort
    from ha_arbiter.domain.cluster import ClusterNodeState


@dataclass(frozen=True)
class SplitBrainStatus:
    """Result of split-brain detection.

    Attributes:
        is_split_brain: True if 2+ nodes report active.
        active_nodes: All nodes reporting active. Empty during an election,
            one item in a healthy cluster, several in a split brain.
    """

    is_split_brain: bool
    active_nodes: list[ClusterNodeState]


class SplitBrainDetector:
    """Detects split-brain scenarios in an HA cluster.

    A healthy cluster has exactly one active node. A cluster with no active
    node is waiting for a failover, which is not a split brain.

    Dependencies:
        - ClusterStatePort: Provides the nodes and their reported roles.
    """

    def __init__(
        self,
        port: ClusterStatePort,
        metrics: MetricsPort | None = None,
    ) -> None:
        self.port = port
        self._metrics = metrics

    def detect_split_brain(self) -> SplitBrainStatus:
        """Detect if more than one node currently reports active.

        Raises:
            May propagate exceptions from the port if the cluster state
            cannot be determined.
        """
        active_nodes = self.port.get_cluster_state().get_active_nodes()
        is_split_brain = len(active_nodes) > 1

        if self._metrics is not None:
            self._metrics.set_split_brain_detected(is_split_brain)

        return SplitBrainStatus(is_split_brain=is_split_brain, active_nodes=active_nodes)
