"""Wiring of one HA node from ArbiterSettings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ha_arbiter.adapters.event_emitters import CompositeEventEmitter, LoggingEventEmitter
from ha_arbiter.adapters.httpx_peer_probe import HTTPXPeerStatusProbe
from ha_arbiter.adapters.metrics_port import MetricsPort, NoOpMetricsAdapter
from ha_arbiter.adapters.peer_cluster_state import PeerClusterStateAdapter
from ha_arbiter.factories import create_lease_store
from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator
from ha_arbiter.usecases.failover_detector import FailoverDetector
from ha_arbiter.usecases.health_checker import HealthChecker
from ha_arbiter.usecases.heartbeat_loop import HeartbeatLoop
from ha_arbiter.usecases.lease_manager import LeaseManager
from ha_arbiter.usecases.liveness_checker import LivenessChecker
from ha_arbiter.usecases.node_registry import NodeRegistry
from ha_arbiter.usecases.readiness_checker import ReadinessChecker
from ha_arbiter.usecases.split_brain_detector import SplitBrainDetector

if TYPE_CHECKING:
    from ha_arbiter.adapters.ports import (
        ClusterStatePort,
        EventEmitterPort,
        LeaseStorePort,
        PeerStatusPort,
        TimeProvider,
    )
    from ha_arbiter.domain.settings import ArbiterSettings


@dataclass
class ArbiterRuntime:
    """Every collaborator of one running HA node."""

    settings: ArbiterSettings
    store: LeaseStorePort
    metrics: MetricsPort
    events: CompositeEventEmitter
    registry: NodeRegistry
    lease_manager: LeaseManager
    detector: FailoverDetector
    coordinator: FailoverCoordinator
    loop: HeartbeatLoop
    split_brain_detector: SplitBrainDetector
    health_checker: HealthChecker
    liveness_checker: LivenessChecker
    readiness_checker: ReadinessChecker


def _create_metrics(settings: ArbiterSettings) -> MetricsPort:
    if not settings.metrics.enabled:
        return NoOpMetricsAdapter()

    from ha_arbiter.adapters.prometheus_metrics import PrometheusMetricsAdapter

    return PrometheusMetricsAdapter(prefix=settings.metrics.prefix)


def build_runtime(
    settings: ArbiterSettings,
    store: LeaseStorePort | None = None,
    metrics: MetricsPort | None = None,
    time_provider: TimeProvider | None = None,
    event_emitter: EventEmitterPort | None = None,
    probe: PeerStatusPort | None = None,
) -> ArbiterRuntime:
    """Assemble a node from settings.

    Any collaborator passed in replaces the one settings would select.
    Callbacks subscribed to runtime.events see every failover event after
    the emitter (a LoggingEventEmitter by default).
    With peers configured, split brain is detected by asking every peer
    for its role; otherwise by reading roles from the registry.
    """
    if store is None:
        store = create_lease_store(settings, time_provider=time_provider)
    if metrics is None:
        metrics = _create_metrics(settings)

    events = CompositeEventEmitter(
        event_emitter if event_emitter is not None else LoggingEventEmitter()
    )

    registry = NodeRegistry(
        store,
        settings.node_name,
        settings.node_address,
        event_emitter=events,
    )
    lease_manager = LeaseManager(
        store,
        settings.node_name,
        metrics=metrics,
        heartbeat_interval=settings.heartbeat_interval,
    )
    detector = FailoverDetector(settings.heartbeat_interval)
    coordinator = FailoverCoordinator(
        settings.node_name,
        event_emitter=events,
        metrics=metrics,
    )
    loop = HeartbeatLoop(
        registry,
        lease_manager,
        detector,
        coordinator,
        time_provider=time_provider,
        heartbeat_interval=settings.heartbeat_interval,
        metrics=metrics,
    )

    cluster_state: ClusterStatePort
    if settings.peers:
        cluster_state = PeerClusterStateAdapter(
            settings.peers,
            probe or HTTPXPeerStatusProbe(),
            local=coordinator.cluster_node_state,
        )
    else:
        cluster_state = registry

    split_brain_detector = SplitBrainDetector(cluster_state, metrics=metrics)
    health_checker = HealthChecker(coordinator, metrics=metrics)
    return ArbiterRuntime(
        settings=settings,
        store=store,
        metrics=metrics,
        events=events,
        registry=registry,
        lease_manager=lease_manager,
        detector=detector,
        coordinator=coordinator,
        loop=loop,
        split_brain_detector=split_brain_detector,
        health_checker=health_checker,
        liveness_checker=LivenessChecker(loop),
        readiness_checker=ReadinessChecker(
            health_checker, coordinator, split_brain_detector
        ),
    )
