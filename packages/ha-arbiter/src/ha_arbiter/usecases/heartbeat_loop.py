"""HeartbeatLoop use case: the periodic cycle driving every HA node."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from ha_arbiter.adapters.ports import (
    LoggingPort,
    RealTimeProvider,
    StdlibLoggingAdapter,
    TimeProvider,
)
from ha_arbiter.domain.events import FailoverEventType
from ha_arbiter.domain.exceptions import (
    HAArbiterError,
    LeaseLostError,
    NodeAlreadyRunningError,
    StoreUnavailableError,
)
from ha_arbiter.domain.lease import DEFAULT_FAILOVER_DELAY, DEFAULT_HEARTBEAT_INTERVAL
from ha_arbiter.domain.node import NodeStatus
from ha_arbiter.usecases.failover_coordinator import NodeRole

if TYPE_CHECKING:
    from ha_arbiter.adapters.metrics_port import MetricsPort
    from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator
    from ha_arbiter.usecases.failover_detector import FailoverDetector
    from ha_arbiter.usecases.lease_manager import LeaseManager
    from ha_arbiter.usecases.node_registry import NodeRegistry

logger = logging.getLogger(__name__)


class HeartbeatLoop:
    """Runs the heartbeat cycle of one node on a background thread.

    Every ``heartbeat_interval`` seconds the loop refreshes the node's
    registry record, renews the lease when active or tries to take it over
    when standby, and marks silent peers UNAVAILABLE.

    An active node that cannot reach the store keeps its role only while
    its last renewed lease cannot expire before the next heartbeat. Past
    that point a standby may hold a newer lease, so the node demotes itself.

    Dependencies:
        - NodeRegistry: Heartbeats and node statuses.
        - LeaseManager: Lease acquisition, renewal and release.
        - FailoverDetector: Decides when the active node is dead.
        - FailoverCoordinator: Local role, health and store reachability.
        - TimeProvider: Local clock used while the store is unreachable.
        - MetricsPort (optional): Failover counter and unavailable gauge.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        lease_manager: LeaseManager,
        detector: FailoverDetector,
        coordinator: FailoverCoordinator,
        time_provider: TimeProvider | None = None,
        logger: LoggingPort | None = None,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        metrics: MetricsPort | None = None,
    ) -> None:
        self._registry = registry
        self._lease_manager = lease_manager
        self._detector = detector
        self._coordinator = coordinator
        self._time = time_provider or RealTimeProvider()
        self._logger = logger or StdlibLoggingAdapter()
        self._heartbeat_interval = heartbeat_interval
        self._metrics = metrics

        self._failover_delay = DEFAULT_FAILOVER_DELAY
        # set once another session took this node's name; the record is theirs
        self._superseded = False
        self._tick_lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def node_name(self) -> str:
        return self._registry.node_name

    @property
    def heartbeat_interval(self) -> float:
        return self._heartbeat_interval

    def start(self) -> None:
        """Register the node and start the background thread.

        Raises:
            NodeAlreadyRunningError: If a live node with the same name runs
                under another session.
            StoreUnavailableError: If the store cannot be reached.
        """
        if self.is_running():
            return
        self._registry.register()
        self._superseded = False
        self._failover_delay = self._lease_manager.failover_delay()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"ha-heartbeat-{self.node_name}",
            daemon=True,
        )
        self._thread.start()
        self._logger.info(
            f"HA node {self.node_name!r} started "
            f"(heartbeat {self._heartbeat_interval:g}s, failover delay {self._failover_delay:g}s)"
        )

    def _run(self) -> None:
        while True:
            with self._tick_lock:
                # stop() may have handed off while this thread waited for the lock
                if self._stop_event.is_set():
                    return
                try:
                    self.tick()
                except Exception:
                    logger.exception(
                        "Unexpected error in heartbeat cycle of %s", self.node_name
                    )
            if self._stop_event.wait(self._heartbeat_interval):
                return

    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def stop(self, graceful: bool = True) -> None:
        """Stop the background thread.

        Args:
            graceful: Release a held lease and mark the node STOPPED so a
                standby takes over on its next tick instead of waiting for
                the failover delay. A node superseded by another session
                leaves the store untouched.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._heartbeat_interval * 2)
        self._thread = None

        if graceful:
            self._handoff()

    def _handoff(self) -> None:
        with self._tick_lock:
            lease = self._coordinator.lease
            if self._superseded:
                self._logger.warning(
                    f"HA node {self.node_name!r} runs under another session, "
                    "leaving its record untouched"
                )
            else:
                try:
                    if lease is not None and self._coordinator.is_active:
                        self._lease_manager.release(lease)
                    self._registry.set_status(NodeStatus.STOPPED)
                except StoreUnavailableError as e:
                    self._logger.error(
                        f"graceful handoff of {self.node_name!r} failed, "
                        f"a standby takes over after the failover delay: {e}"
                    )
                except NodeAlreadyRunningError as e:
                    self._superseded = True
                    self._logger.error(str(e))
            self._coordinator.demote(
                FailoverEventType.GRACEFUL_HANDOFF, reason="node stopping"
            )
        self._logger.info(f"HA node {self.node_name!r} stopped")

    def tick(self) -> NodeRole:
        """Run one heartbeat cycle.

        Returns:
            The node's role after the cycle.
        """
        with self._tick_lock:
            local_now = self._time.get_time_seconds()
            try:
                self._tick(local_now)
            except StoreUnavailableError as e:
                self._on_store_unavailable(local_now, e)
            except NodeAlreadyRunningError as e:
                self._superseded = True
                self._logger.error(str(e))
                self._coordinator.demote(reason=str(e))
                self._stop_event.set()
            except HAArbiterError as e:
                self._logger.error(f"heartbeat cycle of {self.node_name!r} failed: {e}")
            return self._coordinator.role

    def _tick(self, local_now: float) -> None:
        self._registry.heartbeat()
        self._failover_delay = self._lease_manager.failover_delay()

        if self._coordinator.is_active:
            self._tick_active(local_now)
        else:
            self._coordinator.mark_store_reachable(local_now)
            self._tick_standby()

        self._sweep_stale_nodes()

    def _tick_active(self, local_now: float) -> None:
        lease = self._coordinator.lease
        if lease is None:
            self._coordinator.demote(reason="active without a lease")
            return

        if not self._coordinator.is_healthy():
            self._lease_manager.release(lease)
            self._coordinator.mark_store_reachable(local_now)
            self._coordinator.demote(
                FailoverEventType.HEALTH_DEMOTION, reason="node marked unhealthy"
            )
            self._registry.set_status(NodeStatus.STANDBY)
            return

        try:
            renewed = self._lease_manager.renew(lease)
        except LeaseLostError as e:
            self._coordinator.mark_store_reachable(local_now)
            self._coordinator.demote(FailoverEventType.LEASE_LOST, reason=str(e))
            self._registry.set_status(NodeStatus.STANDBY)
            return

        self._coordinator.mark_store_reachable(local_now)
        self._coordinator.update_lease(renewed)

    def _tick_standby(self) -> None:
        if not self._coordinator.can_become_active():
            return

        decision = self._detector.evaluate(
            self._lease_manager.current_lease(), self._registry.now()
        )
        if not decision.should_elect:
            return

        lease = self._lease_manager.try_acquire()
        if lease is None:
            return

        self._coordinator.promote(lease, reason=decision.reason)
        self._registry.set_status(NodeStatus.ACTIVE)
        if lease.term > 1 and self._metrics is not None:
            self._metrics.inc_failovers()

        dead = decision.dead_holder
        if dead is not None and dead != self.node_name:
            record = self._registry.get_node(dead)
            if record is not None and record.status.is_running:
                self._registry.mark_unavailable(dead)
                self._coordinator.emit(
                    FailoverEventType.NODE_UNAVAILABLE, dead, reason=decision.reason
                )

    def _sweep_stale_nodes(self) -> None:
        records = self._registry.list_nodes()
        stale = self._detector.find_stale_nodes(
            records,
            self._registry.now(),
            self._failover_delay,
            exclude=(self.node_name,),
        )
        for name in stale:
            self._registry.mark_unavailable(name)
            self._coordinator.emit(
                FailoverEventType.NODE_UNAVAILABLE,
                name,
                reason=f"no heartbeat for more than {self._failover_delay:g}s",
            )

        if self._metrics is not None:
            stale_names = set(stale)
            self._metrics.set_nodes_unavailable(
                sum(
                    1
                    for record in records
                    if record.status == NodeStatus.UNAVAILABLE or record.name in stale_names
                )
            )

    def _on_store_unavailable(self, local_now: float, error: StoreUnavailableError) -> None:
        self._logger.error(f"HA store unavailable for {self.node_name!r}: {error}")
        self._coordinator.mark_store_unreachable()
        # the next check is one heartbeat away, so fence at the last tick
        # before the held lease can expire
        if self._coordinator.should_self_fence(
            local_now, self._failover_delay, margin=self._heartbeat_interval
        ):
            self._coordinator.demote(
                FailoverEventType.STORE_UNREACHABLE_DEMOTION,
                reason="store unreachable, lease may expire before the next heartbeat",
            )
