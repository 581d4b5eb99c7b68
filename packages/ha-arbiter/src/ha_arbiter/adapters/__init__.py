"""Interface adapters: consistency stores, peer probes and event emitters."""

from ha_arbiter.adapters.ports import (
    ClusterStatePort,
    EventEmitterPort,
    LeaseStorePort,
    LoggingPort,
    PeerStatusPort,
    StdlibLoggingAdapter,
)
from ha_arbiter.adapters.event_emitters import CompositeEventEmitter, LoggingEventEmitter
from ha_arbiter.adapters.httpx_peer_probe import HTTPXPeerStatusProbe
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.adapters.peer_cluster_state import PeerClusterStateAdapter
from ha_arbiter.adapters.sqlite_store import SQLiteLeaseStore

__all__ = [
    "ClusterStatePort",
    "CompositeEventEmitter",
    "EventEmitterPort",
    "HTTPXPeerStatusProbe",
    "InMemoryLeaseStore",
    "LeaseStorePort",
    "LoggingEventEmitter",
    "LoggingPort",
    "PeerClusterStateAdapter",
    "PeerStatusPort",
    "SQLiteLeaseStore",
    "StdlibLoggingAdapter",
]
