"""NodeRegistry use case: candidate server identities and their heartbeats."""

from __future__ import annotations

import uuid

from ha_arbiter.adapters.ports import (
    EventEmitterPort,
    LeaseStorePort,
    LoggingPort,
    StdlibLoggingAdapter,
)
from ha_arbiter.domain.cluster import ClusterNodeState, ClusterState
from ha_arbiter.domain.events import FailoverEvent, FailoverEventType
from ha_arbiter.domain.exceptions import (
    NodeAlreadyRunningError,
    NodeNotFoundError,
    NodeRemovalError,
)
from ha_arbiter.domain.node import (
    NodeRecord,
    NodeRemoval,
    NodeStatus,
    validate_node_name,
)


class NodeRegistry:
    """Tracks the set of HA nodes and when each was last heard from.

    One registry instance belongs to one running node (``node_name``) but can
    read and administer every record in the store.

    Each process gets a fresh ``session_id``. The session makes it possible
    to tell a restart of this node apart from a second process started with
    the same name while the first one is still alive.

    Dependencies:
        - LeaseStorePort: Shared store holding the node records.
        - LoggingPort: Receives registry warnings.
        - EventEmitterPort (optional): Receives NODE_REMOVED events.
    """

    def __init__(
        self,
        store: LeaseStorePort,
        node_name: str,
        node_address: str = "",
        session_id: str | None = None,
        logger: LoggingPort | None = None,
        event_emitter: EventEmitterPort | None = None,
    ) -> None:
        validate_node_name(node_name, "node_name")
        self._store = store
        self.node_name = node_name
        self.node_address = node_address
        self.session_id = session_id or uuid.uuid4().hex
        self._logger = logger or StdlibLoggingAdapter()
        self._event_emitter = event_emitter

    def _new_record(self, now: float, status: NodeStatus) -> NodeRecord:
        return NodeRecord(
            name=self.node_name,
            address=self.node_address,
            status=status,
            last_seen=now,
            session_id=self.session_id,
        )

    def register(self) -> NodeRecord:
        """Register this node as STANDBY.

        Raises:
            NodeAlreadyRunningError: If another session runs a live node
                with the same name.
        """
        record = self._new_record(self._store.now(), NodeStatus.STANDBY)
        if not self._store.register_node(record):
            raise NodeAlreadyRunningError(self.node_name)
        self._logger.info(f"registered HA node {self.node_name!r} as standby")
        return record

    def heartbeat(self) -> NodeRecord:
        """Refresh this node's last_seen, keeping its status.

        A record removed by an operator is re-created as STANDBY.

        Raises:
            NodeAlreadyRunningError: If the record now belongs to another
                session.
        """
        now = self._store.now()
        existing = self._store.get_node(self.node_name)
        if existing is None:
            self._logger.warning(
                f"HA node {self.node_name!r} was removed from the registry, re-registering"
            )
            record = self._new_record(now, NodeStatus.STANDBY)
        elif existing.session_id != self.session_id:
            raise NodeAlreadyRunningError(self.node_name)
        else:
            record = existing.with_heartbeat(now)
            if record.status in (NodeStatus.UNAVAILABLE, NodeStatus.STOPPED):
                record = record.with_status(NodeStatus.STANDBY)
        self._store.upsert_node(record)
        return record

    def set_status(self, status: NodeStatus) -> NodeRecord:
        """Set this node's status and refresh its heartbeat.

        Raises:
            NodeAlreadyRunningError: If the record belongs to another session.
        """
        existing = self._store.get_node(self.node_name)
        if existing is not None and existing.session_id != self.session_id:
            raise NodeAlreadyRunningError(self.node_name)
        record = self._new_record(self._store.now(), status)
        self._store.upsert_node(record)
        return record

    def mark_unavailable(self, name: str) -> NodeRecord | None:
        """Mark another node UNAVAILABLE.

        Returns:
            The updated record, or None if the node is unknown.
        """
        existing = self._store.get_node(name)
        if existing is None:
            return None
        record = existing.with_status(NodeStatus.UNAVAILABLE)
        self._store.upsert_node(record)
        return record

    def now(self) -> float:
        return self._store.now()

    def get_node(self, name: str) -> NodeRecord | None:
        return self._store.get_node(name)

    def list_nodes(self) -> list[NodeRecord]:
        return self._store.list_nodes()

    def remove_node(self, name: str) -> None:
        """Remove a node from the registry.

        Raises:
            NodeNotFoundError: If the node is unknown.
            NodeRemovalError: If the node holds an unexpired lease.
        """
        outcome = self._store.delete_node_if_not_holder(name)
        if outcome == NodeRemoval.NOT_FOUND:
            raise NodeNotFoundError(name)
        if outcome == NodeRemoval.HOLDS_LEASE:
            raise NodeRemovalError(name)

        self._logger.info(f"removed HA node {name!r}")
        if self._event_emitter is not None:
            self._event_emitter.emit(
                FailoverEvent(event_type=FailoverEventType.NODE_REMOVED, node_name=name)
            )

    def cluster_state(self) -> ClusterState:
        """Build a ClusterState from the registry records.

        Implements ClusterStatePort. An empty registry is reported as this
        node alone, not active.
        """
        nodes = tuple(
            ClusterNodeState(
                node_name=record.name,
                is_active=record.status == NodeStatus.ACTIVE,
            )
            for record in self._store.list_nodes()
        )
        if not nodes:
            nodes = (ClusterNodeState(node_name=self.node_name, is_active=False),)
        return ClusterState(nodes=nodes)

    def get_cluster_state(self) -> ClusterState:
        return self.cluster_state()
