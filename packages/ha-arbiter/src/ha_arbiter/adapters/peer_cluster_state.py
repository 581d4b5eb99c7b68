"""ClusterStatePort implementation that asks every peer for its role.

The shared store can only say who *should* be active. Asking the nodes
themselves shows who *believes* it is active, which is what matters when a
partitioned node keeps running on a stale lease.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ha_arbiter.adapters.ports import PeerStatusPort
from ha_arbiter.domain.cluster import ClusterState
from ha_arbiter.domain.exceptions import StoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ha_arbiter.domain.cluster import ClusterNodeState

logger = logging.getLogger(__name__)


class PeerClusterStateAdapter:
    """Builds a ClusterState from the local node plus every reachable peer.

    Unreachable peers are left out: a node that cannot be reached cannot
    serve as active to anyone who is probing it either.
    """

    def __init__(
        self,
        peers: Sequence[str],
        probe: PeerStatusPort,
        local: Callable[[], ClusterNodeState],
    ) -> None:
        """Initialize the adapter.

        Args:
            peers: Base URLs of the other nodes.
            probe: Port used to query each peer.
            local: Returns this node's own state.
        """
        self._peers = tuple(peers)
        self._probe = probe
        self._local = local

    def get_cluster_state(self) -> ClusterState:
        nodes = [self._local()]
        for peer in self._peers:
            try:
                nodes.append(self._probe.fetch_status(peer))
            except StoreUnavailableError as e:
                logger.warning("Skipping unreachable peer %s: %s", peer, e)
        return ClusterState(nodes=tuple(nodes))
