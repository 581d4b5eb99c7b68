"""Unit tests for build_runtime wiring."""

import pytest

from ha_arbiter.adapters.fakes import FakeMetricsAdapter, FakeTimeProvider
from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.adapters.metrics_port import NoOpMetricsAdapter
from ha_arbiter.adapters.peer_cluster_state import PeerClusterStateAdapter
from ha_arbiter.domain.cluster import ClusterNodeState
from ha_arbiter.domain.events import FailoverEvent, FailoverEventType
from ha_arbiter.domain.settings import ArbiterSettings, MetricsSettings
from ha_arbiter.runtime import build_runtime
from ha_arbiter.usecases.failover_coordinator import NodeRole
from tests.core.unit.fakes import FakeEventEmitter


class StandbyPeers:
    def fetch_status(self, url: str) -> ClusterNodeState:
        return ClusterNodeState(url.rsplit("/", 1)[-1], is_active=False)


@pytest.mark.tier(1)
@pytest.mark.tra("UseCase.Runtime")
class TestBuildRuntime:
    """Test assembly of one node from settings."""

    def test_defaults_without_metrics(self) -> None:
        runtime = build_runtime(ArbiterSettings(node_name="node-a"))
        assert isinstance(runtime.store, InMemoryLeaseStore)
        assert isinstance(runtime.metrics, NoOpMetricsAdapter)
        assert runtime.split_brain_detector.port is runtime.registry
        assert runtime.loop.heartbeat_interval == 5.0
        assert runtime.lease_manager.heartbeat_interval == 5.0

    def test_injected_collaborators_drive_one_cycle(
        self, store: InMemoryLeaseStore, clock: FakeTimeProvider
    ) -> None:
        events = FakeEventEmitter()
        metrics = FakeMetricsAdapter()
        runtime = build_runtime(
            ArbiterSettings(node_name="node-a"),
            store=store,
            metrics=metrics,
            time_provider=clock,
            event_emitter=events,
        )
        subscribed: list[FailoverEvent] = []
        runtime.events.subscribe(subscribed.append)

        runtime.registry.register()
        assert runtime.loop.tick() == NodeRole.ACTIVE

        assert events.types() == [FailoverEventType.PROMOTED_TO_ACTIVE]
        assert subscribed == events.events
        assert metrics.current_node_role is True
        assert runtime.readiness_checker.check_readiness().can_accept_writes

    def test_peers_switch_split_brain_source(self) -> None:
        settings = ArbiterSettings(
            node_name="node-a", peers=("http://10.0.0.12:8080/node-b",)
        )
        runtime = build_runtime(settings, probe=StandbyPeers())

        assert isinstance(runtime.split_brain_detector.port, PeerClusterStateAdapter)
        status = runtime.split_brain_detector.detect_split_brain()
        assert not status.is_split_brain

    def test_metrics_enabled_uses_prometheus(self) -> None:
        pytest.importorskip("prometheus_client")
        from ha_arbiter.adapters.prometheus_metrics import PrometheusMetricsAdapter

        # the default registry is process-wide: use a prefix no other test registers
        runtime = build_runtime(
            ArbiterSettings(
                node_name="node-a",
                metrics=MetricsSettings(enabled=True, prefix="runtime_test_ha"),
            )
        )
        assert isinstance(runtime.metrics, PrometheusMetricsAdapter)
