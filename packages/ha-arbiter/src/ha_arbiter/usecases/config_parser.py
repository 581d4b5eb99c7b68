"""Config parser use case for the HA arbiter."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import yaml

from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.settings import (
    ArbiterSettings,
    HTTPSettings,
    MetricsSettings,
    RaftStoreConfig,
    StoreSettings,
)

ENV_NODE_NAME = "HA_NODE_NAME"
ENV_NODE_ADDRESS = "HA_NODE_ADDRESS"
ENV_FAILOVER_DELAY = "HA_FAILOVER_DELAY"


def _section(config: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = config.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise HAConfigError(f"'{key}' must be a mapping")
    return value


def _number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise HAConfigError(f"{field_name} must be a number, got: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise HAConfigError(f"{field_name} must be a number, got: {value!r}") from e


class ConfigParser:
    """Parses HA arbiter YAML configuration to settings.

    HA_NODE_NAME, HA_NODE_ADDRESS and HA_FAILOVER_DELAY override the
    corresponding YAML fields so one file can be shared by every node.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def parse(self, yaml_str: str) -> ArbiterSettings:
        """Parse HA arbiter YAML config to settings.

        Args:
            yaml_str: YAML string representing the arbiter configuration

        Returns:
            ArbiterSettings domain object

        Raises:
            HAConfigError: If YAML is invalid, required fields are missing,
                or a value fails validation
        """
        try:
            config = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise HAConfigError(f"Invalid YAML: {e}") from e

        if not isinstance(config, dict):
            raise HAConfigError("Config must be a dictionary")

        node = _section(config, "node")
        node_name = self._environ.get(ENV_NODE_NAME) or node.get("name")
        if not node_name:
            raise HAConfigError(
                f"Missing required field in config: 'node.name' (or {ENV_NODE_NAME})"
            )
        node_address = self._environ.get(ENV_NODE_ADDRESS) or node.get("address") or ""

        failover_delay = self._environ.get(ENV_FAILOVER_DELAY) or config.get(
            "failover_delay", ArbiterSettings.failover_delay
        )

        peers = config.get("peers") or []
        if not isinstance(peers, list):
            raise HAConfigError("'peers' must be a list")

        return ArbiterSettings(
            node_name=str(node_name),
            node_address=str(node_address),
            heartbeat_interval=_number(
                config.get("heartbeat_interval", ArbiterSettings.heartbeat_interval),
                "heartbeat_interval",
            ),
            failover_delay=_number(failover_delay, "failover_delay"),
            store=self._parse_store(_section(config, "store")),
            metrics=self._parse_metrics(_section(config, "metrics")),
            http=self._parse_http(_section(config, "http")),
            peers=tuple(str(peer).rstrip("/") for peer in peers),
        )

    def _parse_store(self, store: Mapping[str, Any]) -> StoreSettings:
        raft: RaftStoreConfig | None = None
        raft_section = _section(store, "raft")
        if raft_section:
            try:
                self_addr = raft_section["self_addr"]
                partners = raft_section["partners"]
            except KeyError as e:
                raise HAConfigError(
                    f"Missing required field in config: store.raft.{e.args[0]}"
                ) from e
            if not isinstance(partners, list):
                raise HAConfigError("'store.raft.partners' must be a list")
            raft = RaftStoreConfig(
                self_addr=str(self_addr),
                partners=tuple(str(p) for p in partners),
                commit_timeout=_number(
                    raft_section.get("commit_timeout", 5.0), "store.raft.commit_timeout"
                ),
            )

        return StoreSettings(
            type=store.get("type", "memory"),
            path=store.get("path"),
            raft=raft,
            timeout=_number(store.get("timeout", 5.0), "store.timeout"),
        )

    def _parse_metrics(self, metrics: Mapping[str, Any]) -> MetricsSettings:
        port = metrics.get("port", MetricsSettings.port)
        if not isinstance(port, int) or isinstance(port, bool):
            raise HAConfigError(f"metrics.port must be an integer, got: {port!r}")
        return MetricsSettings(
            enabled=bool(metrics.get("enabled", False)),
            prefix=str(metrics.get("prefix", MetricsSettings.prefix)),
            port=port,
        )

    def _parse_http(self, http: Mapping[str, Any]) -> HTTPSettings:
        port = http.get("port", HTTPSettings.port)
        if not isinstance(port, int) or isinstance(port, bool):
            raise HAConfigError(f"http.port must be an integer, got: {port!r}")
        return HTTPSettings(
            enabled=bool(http.get("enabled", False)),
            host=str(http.get("host", HTTPSettings.host)),
            port=port,
        )

    def parse_file(self, path: str) -> ArbiterSettings:
        """Read and parse a YAML configuration file.

        Raises:
            HAConfigError: If the file cannot be read or parsed
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise HAConfigError(f"Cannot read config file {path}: {e}") from e
        return self.parse(content)
