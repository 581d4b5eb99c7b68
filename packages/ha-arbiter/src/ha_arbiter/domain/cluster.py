"""Domain value objects for split-brain detection.

This module defines the snapshot of which nodes claim to be active. It is
built either from the shared registry or by probing peers over HTTP, and is
consumed by the SplitBrainDetector use case.
"""

from __future__ import annotations

from dataclasses import dataclass

from ha_arbiter.domain.exceptions import HAConfigError


@dataclass(frozen=True)
class ClusterNodeState:
    """Represents the state of a single node as seen by the detector.

    Attributes:
        node_name: Unique name of the node within the cluster.
                  Must be non-empty and non-whitespace.
        is_active: Whether this node claims to hold the active lease.
        term: Lease term the node reports, if it is active.
    """

    node_name: str
    is_active: bool
    term: int | None = None

    def __post_init__(self) -> None:
        if not self.node_name:
            raise HAConfigError("node_name cannot be empty")

        if not self.node_name.strip():
            raise HAConfigError("node_name cannot be whitespace-only")


@dataclass(frozen=True)
class ClusterState:
    """Represents the state of every known node in the cluster.

    Attributes:
        nodes: Tuple of ClusterNodeState objects. Must contain at least one node.

    Invariants:
        - nodes is never empty
        - there should be at most one active node in a healthy cluster
    """

    nodes: tuple[ClusterNodeState, ...]

    def __post_init__(self) -> None:
        if not self.nodes:
            raise HAConfigError("nodes cannot be empty")

    def count_active(self) -> int:
        """Count the number of nodes claiming to be active."""
        return sum(1 for node in self.nodes if node.is_active)

    def has_single_active(self) -> bool:
        """Check if exactly one node is active."""
        return self.count_active() == 1

    def get_active_nodes(self) -> list[ClusterNodeState]:
        """Get all nodes that claim to be active.

        Returns:
            May be empty if no node is active, or contain several nodes
            during a split brain.
        """
        return [node for node in self.nodes if node.is_active]

    def get_standby_nodes(self) -> list[ClusterNodeState]:
        return [node for node in self.nodes if not node.is_active]
