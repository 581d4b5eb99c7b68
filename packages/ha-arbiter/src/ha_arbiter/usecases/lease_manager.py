"""LeaseManager use case: the exclusive, time-bounded active lease."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ha_arbiter.adapters.ports import LeaseStorePort
from ha_arbiter.domain.exceptions import HAConfigError, LeaseLostError
from ha_arbiter.domain.lease import Lease, validate_failover_delay

if TYPE_CHECKING:
    from ha_arbiter.adapters.metrics_port import MetricsPort


class LeaseManager:
    """Grants, renews and releases the active lease for one node.

    The lease TTL is the cluster-wide failover delay read from the store on
    every acquisition, so a delay changed by an operator takes effect the
    next time the lease changes hands, without restarting any node.

    Invariants (enforced by the store through the domain lease rules):
        - at most one unexpired lease exists
        - the term strictly increases whenever the holder changes
        - renewals never change the term

    Dependencies:
        - LeaseStorePort: Strongly-consistent store performing the atomic
          read-decide-write of every lease operation.
    """

    def __init__(
        self,
        store: LeaseStorePort,
        node_name: str,
        metrics: MetricsPort | None = None,
        heartbeat_interval: float | None = None,
    ) -> None:
        self._store = store
        self.node_name = node_name
        self._metrics = metrics
        self.heartbeat_interval = heartbeat_interval

    def failover_delay(self) -> float:
        return self._store.get_failover_delay()

    def set_failover_delay(self, seconds: float) -> None:
        """Change the cluster-wide failover delay.

        The delay is also the lease TTL, so it must exceed this node's
        heartbeat interval or the lease would lapse between renewals.

        Raises:
            HAConfigError: If seconds is outside the allowed range or not
                longer than the heartbeat interval.
        """
        validate_failover_delay(seconds)
        if self.heartbeat_interval is not None and seconds <= self.heartbeat_interval:
            raise HAConfigError(
                f"failover delay must be longer than the heartbeat interval "
                f"({self.heartbeat_interval:g}s), got: {seconds!r}"
            )
        self._store.set_failover_delay(float(seconds))

    def try_acquire(self) -> Lease | None:
        """Try to become the lease holder.

        Returns:
            The granted lease, or None if another node holds a live lease.
        """
        lease = self._store.acquire_lease(self.node_name, self.failover_delay())
        if lease is not None and self._metrics is not None:
            self._metrics.set_lease_term(lease.term)
        return lease

    def renew(self, lease: Lease) -> Lease:
        """Renew a lease this node holds.

        Raises:
            LeaseLostError: If the lease expired or changed hands.
        """
        renewed = self._store.renew_lease(lease.holder, lease.term)
        if renewed is None:
            raise LeaseLostError(lease.holder, lease.term)
        return renewed

    def release(self, lease: Lease) -> bool:
        """Give the lease up so a standby can take over immediately."""
        return self._store.release_lease(lease.holder, lease.term)

    def current_lease(self) -> Lease | None:
        return self._store.get_lease()

    def holder_is_live(self) -> bool:
        """Check whether any node currently holds an unexpired lease."""
        lease = self._store.get_lease()
        return lease is not None and not lease.is_expired(self._store.now())
