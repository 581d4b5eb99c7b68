"""Unit tests for the Lease value object and the lease arbitration rules."""

import pytest
from hypothesis import given, settings, strategies as st

from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.lease import (
    FAILOVER_DELAY_MAX,
    FAILOVER_DELAY_MIN,
    Lease,
    grant_lease,
    lease_summary,
    release_lease,
    renew_lease,
    validate_failover_delay,
)


def make_lease(holder: str = "node-a", term: int = 1, renewed_at: float = 100.0, ttl: float = 60.0) -> Lease:
    return Lease(holder=holder, term=term, acquired_at=renewed_at, renewed_at=renewed_at, ttl=ttl)


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.Lease")
class TestLease:
    """Test Lease value object."""

    def test_expires_at_is_renewal_plus_ttl(self) -> None:
        assert make_lease(renewed_at=100.0, ttl=60.0).expires_at == 160.0

    def test_lease_is_live_until_expiry(self) -> None:
        lease = make_lease(renewed_at=100.0, ttl=60.0)
        assert not lease.is_expired(159.9)
        assert lease.is_expired(160.0)

    def test_remaining_never_negative(self) -> None:
        lease = make_lease(renewed_at=100.0, ttl=60.0)
        assert lease.remaining(130.0) == 30.0
        assert lease.remaining(500.0) == 0.0

    def test_is_held_by_checks_term_when_given(self) -> None:
        lease = make_lease(holder="node-a", term=3)
        assert lease.is_held_by("node-a")
        assert lease.is_held_by("node-a", 3)
        assert not lease.is_held_by("node-a", 2)
        assert not lease.is_held_by("node-b")

    def test_reject_zero_term(self) -> None:
        with pytest.raises(HAConfigError, match="term"):
            make_lease(term=0)

    def test_reject_non_positive_ttl(self) -> None:
        with pytest.raises(HAConfigError, match="ttl"):
            make_lease(ttl=0)

    def test_lease_is_immutable(self) -> None:
        lease = make_lease()
        with pytest.raises(AttributeError):
            lease.term = 5  # type: ignore[misc]

    def test_summary_reports_expiry(self) -> None:
        summary = lease_summary(make_lease(renewed_at=100.0, ttl=60.0), now=150.0)
        assert summary["holder"] == "node-a"
        assert summary["expires_in"] == 10.0
        assert summary["expired"] is False


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Policy.FailoverDelayRange")
class TestValidateFailoverDelay:
    """Test failover delay bounds."""

    @pytest.mark.parametrize("seconds", [FAILOVER_DELAY_MIN, 60.0, FAILOVER_DELAY_MAX])
    def test_accept_values_in_range(self, seconds: float) -> None:
        validate_failover_delay(seconds)

    @pytest.mark.parametrize("seconds", [9.9, 0.0, -5.0, 900.1])
    def test_reject_values_out_of_range(self, seconds: float) -> None:
        with pytest.raises(HAConfigError, match="between 10 and 900"):
            validate_failover_delay(seconds)


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Policy.LeaseArbitration")
class TestGrantLease:
    """Test the grant rule every store applies."""

    def test_first_grant_gets_term_one(self) -> None:
        lease = grant_lease(None, "node-a", now=100.0, ttl=60.0)
        assert lease is not None
        assert lease.holder == "node-a"
        assert lease.term == 1
        assert lease.acquired_at == lease.renewed_at == 100.0

    def test_live_lease_of_other_node_blocks_candidate(self) -> None:
        current = make_lease(holder="node-a", renewed_at=100.0)
        assert grant_lease(current, "node-b", now=159.0, ttl=60.0) is None

    def test_live_lease_of_candidate_is_refreshed_without_new_term(self) -> None:
        current = make_lease(holder="node-a", term=4, renewed_at=100.0)
        lease = grant_lease(current, "node-a", now=120.0, ttl=30.0)
        assert lease is not None
        assert lease.term == 4
        assert lease.renewed_at == 120.0
        assert lease.ttl == 30.0
        assert lease.acquired_at == 100.0

    def test_expired_lease_goes_to_candidate_with_next_term(self) -> None:
        current = make_lease(holder="node-a", term=4, renewed_at=100.0)
        lease = grant_lease(current, "node-b", now=160.0, ttl=60.0)
        assert lease is not None
        assert lease.holder == "node-b"
        assert lease.term == 5

    def test_expired_holder_taking_lease_back_gets_new_term(self) -> None:
        current = make_lease(holder="node-a", term=4, renewed_at=100.0)
        lease = grant_lease(current, "node-a", now=200.0, ttl=60.0)
        assert lease is not None
        assert lease.term == 5

    def test_term_continues_after_release(self) -> None:
        lease = grant_lease(None, "node-b", now=100.0, ttl=60.0, last_term=7)
        assert lease is not None
        assert lease.term == 8


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Policy.LeaseArbitration")
class TestRenewAndRelease:
    """Test renewal and release rules."""

    def test_renew_moves_renewed_at_and_keeps_term(self) -> None:
        current = make_lease(term=2, renewed_at=100.0)
        renewed = renew_lease(current, "node-a", 2, now=130.0)
        assert renewed is not None
        assert renewed.renewed_at == 130.0
        assert renewed.term == 2
        assert renewed.ttl == current.ttl

    def test_renew_rejects_expired_lease(self) -> None:
        current = make_lease(renewed_at=100.0, ttl=60.0)
        assert renew_lease(current, "node-a", 1, now=160.0) is None

    def test_renew_rejects_stale_term(self) -> None:
        current = make_lease(term=3)
        assert renew_lease(current, "node-a", 2, now=110.0) is None

    def test_renew_rejects_other_holder(self) -> None:
        assert renew_lease(make_lease(), "node-b", 1, now=110.0) is None

    def test_renew_without_lease(self) -> None:
        assert renew_lease(None, "node-a", 1, now=110.0) is None

    def test_release_by_holder_clears_lease(self) -> None:
        assert release_lease(make_lease(term=2), "node-a", 2) is None

    def test_release_by_stale_term_keeps_lease(self) -> None:
        current = make_lease(holder="node-b", term=5)
        assert release_lease(current, "node-a", 4) is current


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.LeaseTermIncreases")
@pytest.mark.property
class TestLeaseTermProperties:
    """Property-based tests for fencing terms."""

    @settings(max_examples=50)
    @given(
        steps=st.lists(
            st.tuples(
                st.sampled_from(["node-a", "node-b", "node-c"]),
                st.floats(min_value=0.0, max_value=120.0),
                st.booleans(),
            ),
            min_size=1,
            max_size=30,
        )
    )
    def test_term_strictly_increases_when_holder_changes(
        self, steps: list[tuple[str, float, bool]]
    ) -> None:
        """Any interleaving of grants and releases never reuses a term."""
        now = 0.0
        current: Lease | None = None
        last_term = 0
        holders: list[tuple[str, int]] = []

        for candidate, elapsed, release in steps:
            now += elapsed
            if release and current is not None:
                current = release_lease(current, current.holder, current.term)
                continue
            granted = grant_lease(current, candidate, now, ttl=60.0, last_term=last_term)
            if granted is None:
                continue
            current = granted
            last_term = max(last_term, granted.term)
            holders.append((granted.holder, granted.term))

        for (prev_holder, prev_term), (holder, term) in zip(holders, holders[1:]):
            assert term >= prev_term
            if holder != prev_holder:
                assert term > prev_term

    @settings(max_examples=50)
    @given(
        renewed_at=st.floats(min_value=0.0, max_value=1e6),
        ttl=st.floats(min_value=10.0, max_value=900.0),
        offset=st.floats(min_value=0.0, max_value=1e3),
    )
    def test_other_node_never_granted_a_live_lease(
        self, renewed_at: float, ttl: float, offset: float
    ) -> None:
        current = make_lease(holder="node-a", renewed_at=renewed_at, ttl=ttl)
        now = renewed_at + offset
        granted = grant_lease(current, "node-b", now, ttl)
        assert (granted is None) == (not current.is_expired(now))
