"""Unit tests for ArbiterSettings and its nested settings."""

import pytest
from hypothesis import given, strategies as st

from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.settings import (
    ArbiterSettings,
    HTTPSettings,
    MetricsSettings,
    RaftStoreConfig,
    StoreSettings,
)


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.ArbiterSettings")
class TestArbiterSettings:
    """Test ArbiterSettings domain entity."""

    def test_defaults(self) -> None:
        settings = ArbiterSettings(node_name="node-a")
        assert settings.heartbeat_interval == 5.0
        assert settings.failover_delay == 60.0
        assert settings.store.type == "memory"
        assert not settings.metrics.enabled
        assert not settings.http.enabled
        assert settings.peers == ()

    def test_settings_are_frozen(self) -> None:
        settings = ArbiterSettings(node_name="node-a")
        with pytest.raises(AttributeError):
            settings.node_name = "node-b"  # type: ignore[misc]

    def test_reject_invalid_node_name(self) -> None:
        with pytest.raises(HAConfigError, match="node_name"):
            ArbiterSettings(node_name=" padded ")

    def test_reject_non_positive_heartbeat(self) -> None:
        with pytest.raises(HAConfigError, match="heartbeat_interval must be > 0"):
            ArbiterSettings(node_name="node-a", heartbeat_interval=0)

    def test_reject_heartbeat_not_below_failover_delay(self) -> None:
        with pytest.raises(HAConfigError, match="less than failover_delay"):
            ArbiterSettings(node_name="node-a", heartbeat_interval=10.0, failover_delay=10.0)

    @pytest.mark.parametrize("delay", [5.0, 901.0])
    def test_reject_failover_delay_out_of_range(self, delay: float) -> None:
        with pytest.raises(HAConfigError, match="failover delay"):
            ArbiterSettings(node_name="node-a", failover_delay=delay)

    def test_reject_peer_without_scheme(self) -> None:
        with pytest.raises(HAConfigError, match="http"):
            ArbiterSettings(node_name="node-a", peers=("10.0.0.12:8080",))

    def test_accept_http_peers(self) -> None:
        settings = ArbiterSettings(
            node_name="node-a",
            peers=("http://10.0.0.12:8080", "https://node-c.internal"),
        )
        assert len(settings.peers) == 2

    @pytest.mark.property
    @given(
        heartbeat=st.floats(min_value=0.1, max_value=9.9),
        delay=st.floats(min_value=10.0, max_value=900.0),
    )
    def test_any_heartbeat_below_minimum_delay_is_valid(
        self, heartbeat: float, delay: float
    ) -> None:
        settings = ArbiterSettings(
            node_name="node-a", heartbeat_interval=heartbeat, failover_delay=delay
        )
        assert settings.heartbeat_interval < settings.failover_delay


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.StoreSettings")
class TestStoreSettings:
    """Test store selection settings."""

    def test_reject_unknown_type(self) -> None:
        with pytest.raises(HAConfigError, match="store type"):
            StoreSettings(type="etcd")  # type: ignore[arg-type]

    def test_sqlite_requires_path(self) -> None:
        with pytest.raises(HAConfigError, match="path is required"):
            StoreSettings(type="sqlite")

    def test_sqlite_rejects_relative_path(self) -> None:
        with pytest.raises(HAConfigError, match="absolute"):
            StoreSettings(type="sqlite", path="data/ha.db")

    def test_sqlite_rejects_traversal(self) -> None:
        with pytest.raises(HAConfigError, match="traversal"):
            StoreSettings(type="sqlite", path="/var/lib/../ha.db")

    def test_sqlite_rejects_null_byte(self) -> None:
        with pytest.raises(HAConfigError, match="null byte"):
            StoreSettings(type="sqlite", path="/var/lib/ha\x00.db")

    def test_sqlite_rejects_non_string_path(self) -> None:
        with pytest.raises(HAConfigError, match="path must be a string"):
            StoreSettings(type="sqlite", path=123)  # type: ignore[arg-type]

    def test_raft_requires_raft_config(self) -> None:
        with pytest.raises(HAConfigError, match="raft settings are required"):
            StoreSettings(type="raft")

    def test_valid_sqlite(self) -> None:
        settings = StoreSettings(type="sqlite", path="/var/lib/ha/ha.db")
        assert settings.path == "/var/lib/ha/ha.db"


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.RaftStoreConfig")
class TestRaftStoreConfig:
    """Test Raft store configuration."""

    def test_valid_config(self) -> None:
        config = RaftStoreConfig(
            self_addr="10.0.0.11:20202",
            partners=("10.0.0.12:20202", "10.0.0.13:20202"),
        )
        assert config.commit_timeout == 5.0

    @pytest.mark.parametrize("addr", ["", "10.0.0.11", "10.0.0.11:port", ":20202"])
    def test_reject_bad_self_addr(self, addr: str) -> None:
        with pytest.raises(HAConfigError, match="self_addr"):
            RaftStoreConfig(self_addr=addr, partners=("10.0.0.12:20202",))

    def test_reject_empty_partners(self) -> None:
        with pytest.raises(HAConfigError, match="partners list cannot be empty"):
            RaftStoreConfig(self_addr="10.0.0.11:20202", partners=())

    def test_reject_self_in_partners(self) -> None:
        with pytest.raises(HAConfigError, match="self_addr"):
            RaftStoreConfig(
                self_addr="10.0.0.11:20202",
                partners=("10.0.0.11:20202", "10.0.0.12:20202"),
            )

    def test_reject_duplicate_partners(self) -> None:
        with pytest.raises(HAConfigError, match="duplicate"):
            RaftStoreConfig(
                self_addr="10.0.0.11:20202",
                partners=("10.0.0.12:20202", "10.0.0.12:20202"),
            )

    def test_reject_non_positive_commit_timeout(self) -> None:
        with pytest.raises(HAConfigError, match="commit_timeout"):
            RaftStoreConfig(
                self_addr="10.0.0.11:20202",
                partners=("10.0.0.12:20202",),
                commit_timeout=0,
            )


@pytest.mark.tier(1)
@pytest.mark.tra("Domain.Invariant.ServerSettings")
class TestMetricsAndHTTPSettings:
    """Test exporter and status API settings."""

    def test_metrics_defaults(self) -> None:
        settings = MetricsSettings()
        assert settings.prefix == "ha_arbiter"
        assert settings.port == 9108

    def test_metrics_reject_empty_prefix(self) -> None:
        with pytest.raises(HAConfigError, match="prefix"):
            MetricsSettings(prefix=" ")

    @pytest.mark.parametrize("port", [0, 65536])
    def test_reject_port_out_of_range(self, port: int) -> None:
        with pytest.raises(HAConfigError, match="port out of range"):
            MetricsSettings(port=port)
        with pytest.raises(HAConfigError, match="port out of range"):
            HTTPSettings(port=port)

    def test_http_reject_empty_host(self) -> None:
        with pytest.raises(HAConfigError, match="host"):
            HTTPSettings(host="")
