"""HA arbiter settings domain entities."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.lease import (
    DEFAULT_FAILOVER_DELAY,
    DEFAULT_HEARTBEAT_INTERVAL,
    validate_failover_delay,
)
from ha_arbiter.domain.node import validate_node_name

_STORE_TYPES = ("memory", "sqlite", "raft")


def _validate_host_port(value: str, field_name: str) -> None:
    if not value or not value.strip():
        raise HAConfigError(f"{field_name} cannot be empty or whitespace-only")

    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise HAConfigError(
            f"{field_name} must be in 'host:port' format, got: {value!r}"
        )


@dataclass(frozen=True)
class RaftStoreConfig:
    """Raft-replicated store configuration.

    Attributes:
        self_addr: Raft address of this node (e.g., '10.0.0.11:20202').
        partners: Raft addresses of the other nodes. Must be non-empty.
        commit_timeout: Seconds to wait for a replicated write to commit.
    """

    self_addr: str
    partners: tuple[str, ...]
    commit_timeout: float = 5.0

    def __post_init__(self) -> None:
        """Validate Raft configuration."""
        _validate_host_port(self.self_addr, "self_addr")

        if not self.partners:
            raise HAConfigError("partners list cannot be empty")

        for partner in self.partners:
            _validate_host_port(partner, "partner address")

        if self.self_addr in self.partners:
            raise HAConfigError("partners cannot contain self_addr")

        if len(set(self.partners)) != len(self.partners):
            raise HAConfigError("partners contains duplicate addresses")

        if self.commit_timeout <= 0:
            raise HAConfigError("commit_timeout must be positive")


@dataclass(frozen=True)
class StoreSettings:
    """Consistency store selection.

    Attributes:
        type: One of "memory", "sqlite", "raft".
        path: Database file for the sqlite store. Must be absolute.
        raft: Raft configuration for the raft store.
        timeout: Seconds to wait for a busy sqlite database.
    """

    type: Literal["memory", "sqlite", "raft"] = "memory"
    path: str | None = None
    raft: RaftStoreConfig | None = None
    timeout: float = 5.0

    def __post_init__(self) -> None:
        if self.type not in _STORE_TYPES:
            raise HAConfigError(
                f"store type must be one of {_STORE_TYPES}, got: {self.type!r}"
            )

        if self.type == "sqlite":
            self._validate_path()

        if self.type == "raft" and self.raft is None:
            raise HAConfigError("raft settings are required when store type is 'raft'")

    def _validate_path(self) -> None:
        """Validate that path is absolute and doesn't contain traversal."""
        if self.path is None:
            raise HAConfigError("path is required when store type is 'sqlite'")

        if not isinstance(self.path, str):
            raise HAConfigError(f"path must be a string, got: {self.path!r}")

        if "\x00" in self.path:
            raise HAConfigError(f"path contains null byte, got: {self.path!r}")

        path = Path(self.path)
        if ".." in path.parts:
            raise HAConfigError(f"path contains path traversal, got: {self.path}")

        if not path.is_absolute():
            raise HAConfigError(f"path must be an absolute path, got: {self.path}")


@dataclass(frozen=True)
class MetricsSettings:
    """Prometheus exporter configuration.

    Attributes:
        enabled: Whether to export metrics. Defaults to False.
        prefix: Metric name prefix.
        port: Port for the standalone exporter started by the CLI.
    """

    enabled: bool = False
    prefix: str = "ha_arbiter"
    port: int = 9108

    def __post_init__(self) -> None:
        if not self.prefix or not self.prefix.strip():
            raise HAConfigError("metrics prefix cannot be empty")

        if not 0 < self.port < 65536:
            raise HAConfigError(f"metrics port out of range, got: {self.port}")


@dataclass(frozen=True)
class HTTPSettings:
    """Status API server started by the CLI.

    Peers probe this API to detect split brain, so every node should serve
    it when peers are configured.

    Attributes:
        enabled: Whether the CLI serves the API. Defaults to False.
        host: Interface to bind.
        port: Port to bind.
    """

    enabled: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    def __post_init__(self) -> None:
        if not self.host or not self.host.strip():
            raise HAConfigError("http host cannot be empty")

        if not 0 < self.port < 65536:
            raise HAConfigError(f"http port out of range, got: {self.port}")


@dataclass(frozen=True)
class ArbiterSettings:
    """HA arbiter configuration settings.

    Domain entity with zero external dependencies.

    Attributes:
        node_name: Name of this HA node. Unique within the cluster.
        node_address: Address the node advertises (informational).
        heartbeat_interval: Seconds between heartbeats.
        failover_delay: Seconds of silence before the active node is replaced.
        store: Consistency store selection.
        metrics: Prometheus exporter settings.
        http: Status API server settings.
        peers: Base URLs of peer status endpoints for split-brain probing.
    """

    node_name: str
    node_address: str = ""
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL
    failover_delay: float = DEFAULT_FAILOVER_DELAY
    store: StoreSettings = field(default_factory=StoreSettings)
    metrics: MetricsSettings = field(default_factory=MetricsSettings)
    http: HTTPSettings = field(default_factory=HTTPSettings)
    peers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        validate_node_name(self.node_name, "node_name")
        self._validate_timing()
        self._validate_peers()

    def _validate_timing(self) -> None:
        if self.heartbeat_interval <= 0:
            raise HAConfigError("heartbeat_interval must be > 0")

        validate_failover_delay(self.failover_delay)

        if self.heartbeat_interval >= self.failover_delay:
            raise HAConfigError(
                "heartbeat_interval must be less than failover_delay"
            )

    def _validate_peers(self) -> None:
        for peer in self.peers:
            if not peer.startswith(("http://", "https://")):
                raise HAConfigError(
                    f"peer must be an http(s) URL, got: {peer!r}"
                )
