"""Settings reader for the FastAPI HA arbiter adapter."""

from typing import Any

from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.settings import (
    ArbiterSettings,
    HTTPSettings,
    MetricsSettings,
    RaftStoreConfig,
    StoreSettings,
)

# Required fields that must be present in Pydantic settings
_REQUIRED_FIELDS = ("node_name",)

# Optional top-level fields passed through when present
_OPTIONAL_FIELDS = ("node_address", "heartbeat_interval", "failover_delay")


def _store_settings(pydantic_settings: dict[str, Any]) -> StoreSettings:
    raft: RaftStoreConfig | None = None
    if pydantic_settings.get("raft_self_addr") is not None:
        raft = RaftStoreConfig(
            self_addr=pydantic_settings["raft_self_addr"],
            partners=tuple(pydantic_settings.get("raft_partners") or ()),
        )

    kwargs: dict[str, Any] = {"raft": raft}
    for key, field in (
        ("store_type", "type"),
        ("store_path", "path"),
        ("store_timeout", "timeout"),
    ):
        if key in pydantic_settings:
            kwargs[field] = pydantic_settings[key]
    return StoreSettings(**kwargs)


def get_arbiter_settings(pydantic_settings: dict[str, Any]) -> ArbiterSettings:
    """Convert Pydantic settings dict to ArbiterSettings domain object.

    Top-level keys map directly to ArbiterSettings fields. Nested settings
    use flat prefixed keys: store_type, store_path, store_timeout,
    raft_self_addr, raft_partners, metrics_enabled, metrics_prefix,
    metrics_port, peers.

    Args:
        pydantic_settings: Pydantic settings dict with snake_case keys

    Returns:
        ArbiterSettings domain object

    Raises:
        HAConfigError: If required settings are missing or invalid
    """
    missing = [key for key in _REQUIRED_FIELDS if key not in pydantic_settings]
    if missing:
        raise HAConfigError(
            f"Missing required HA arbiter settings: {', '.join(sorted(missing))}"
        )

    kwargs: dict[str, Any] = {"node_name": pydantic_settings["node_name"]}
    for field in _OPTIONAL_FIELDS:
        if field in pydantic_settings:
            kwargs[field] = pydantic_settings[field]

    metrics_kwargs = {
        field: pydantic_settings[f"metrics_{field}"]
        for field in ("enabled", "prefix", "port")
        if f"metrics_{field}" in pydantic_settings
    }

    # Validation happens in __post_init__ of each domain object
    return ArbiterSettings(
        **kwargs,
        store=_store_settings(pydantic_settings),
        metrics=MetricsSettings(**metrics_kwargs),
        http=HTTPSettings(),
        peers=tuple(pydantic_settings.get("peers") or ()),
    )
