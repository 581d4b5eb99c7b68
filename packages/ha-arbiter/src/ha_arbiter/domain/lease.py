"""Active lease value object and the arbitration rules every store applies.

Stores differ in how they make a read-decide-write cycle atomic (a lock,
a SQLite transaction, a Raft log entry) but all of them decide with the
pure functions in this module, so the outcome is identical everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ha_arbiter.domain.exceptions import HAConfigError

DEFAULT_HEARTBEAT_INTERVAL = 5.0
DEFAULT_FAILOVER_DELAY = 60.0
FAILOVER_DELAY_MIN = 10.0
FAILOVER_DELAY_MAX = 900.0


def validate_failover_delay(seconds: float) -> None:
    """Validate a failover delay against the allowed range.

    Raises:
        HAConfigError: If seconds is outside [FAILOVER_DELAY_MIN, FAILOVER_DELAY_MAX].
    """
    if not FAILOVER_DELAY_MIN <= seconds <= FAILOVER_DELAY_MAX:
        raise HAConfigError(
            f"failover delay must be between {FAILOVER_DELAY_MIN:g} and "
            f"{FAILOVER_DELAY_MAX:g} seconds, got: {seconds!r}"
        )


@dataclass(frozen=True)
class Lease:
    """Time-bounded exclusive right to be the active node.

    Attributes:
        holder: Name of the node holding the lease.
        term: Fencing token. Increases every time the holder changes.
        acquired_at: Store clock reading when the holder first acquired it.
        renewed_at: Store clock reading of the last renewal.
        ttl: Seconds the lease stays valid after renewed_at.
    """

    holder: str
    term: int
    acquired_at: float
    renewed_at: float
    ttl: float

    def __post_init__(self) -> None:
        if self.term < 1:
            raise HAConfigError(f"lease term must be >= 1, got: {self.term}")
        if self.ttl <= 0:
            raise HAConfigError(f"lease ttl must be positive, got: {self.ttl}")

    @property
    def expires_at(self) -> float:
        return self.renewed_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at - now)

    def is_held_by(self, holder: str, term: int | None = None) -> bool:
        if self.holder != holder:
            return False
        return term is None or self.term == term


def lease_summary(lease: Lease, now: float) -> dict[str, Any]:
    """JSON-friendly view of lease as seen at store time now."""
    return {
        "holder": lease.holder,
        "term": lease.term,
        "acquired_at": lease.acquired_at,
        "renewed_at": lease.renewed_at,
        "expires_in": round(lease.remaining(now), 3),
        "expired": lease.is_expired(now),
    }


def grant_lease(
    current: Lease | None,
    candidate: str,
    now: float,
    ttl: float,
    last_term: int = 0,
) -> Lease | None:
    """Decide whether candidate may hold the lease.

    Args:
        current: The lease in the store, if any.
        candidate: Node asking for the lease.
        now: Store clock reading.
        ttl: Lease time-to-live (the cluster failover delay).
        last_term: Highest term ever granted, kept across releases.

    Returns:
        The lease to store, or None if another node holds an unexpired lease.
    """
    if current is not None and not current.is_expired(now):
        if current.holder != candidate:
            return None
        return replace(current, renewed_at=now, ttl=ttl)

    # An expired lease taken back by its own holder still gets a new term:
    # other nodes may already have acted on the expiry.
    previous_term = max(last_term, current.term if current is not None else 0)
    return Lease(
        holder=candidate,
        term=previous_term + 1,
        acquired_at=now,
        renewed_at=now,
        ttl=ttl,
    )


def renew_lease(
    current: Lease | None,
    holder: str,
    term: int,
    now: float,
    ttl: float | None = None,
) -> Lease | None:
    """Renew the lease for its unexpired holder.

    Returns:
        The renewed lease, or None if holder/term no longer match or the
        lease already expired.
    """
    if current is None or not current.is_held_by(holder, term):
        return None
    if current.is_expired(now):
        return None
    return replace(current, renewed_at=now, ttl=current.ttl if ttl is None else ttl)


def release_lease(current: Lease | None, holder: str, term: int) -> Lease | None:
    """Return the lease that should remain after holder releases.

    Returns:
        None when holder owned the lease with that term, current otherwise.
    """
    if current is not None and current.is_held_by(holder, term):
        return None
    return current
