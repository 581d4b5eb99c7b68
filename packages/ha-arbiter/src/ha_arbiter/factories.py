"""Factory functions for creating consistency stores.

Provides factory methods to instantiate LeaseStorePort implementations
from settings. Handles optional dependency imports gracefully.
"""

from __future__ import annotations

from ha_arbiter.adapters.memory_store import InMemoryLeaseStore
from ha_arbiter.adapters.ports import LeaseStorePort, TimeProvider
from ha_arbiter.adapters.sqlite_store import SQLiteLeaseStore
from ha_arbiter.domain.exceptions import HAConfigError
from ha_arbiter.domain.settings import ArbiterSettings


class RaftLeaseNotInstalledError(ImportError):
    """Raised when the raft store is configured but raft-lease is not installed.

    Install with: pip install ha-arbiter[raft]
    """

    def __init__(self) -> None:
        super().__init__(
            "raft-lease is not installed. "
            "Install with: pip install ha-arbiter[raft]"
        )


def create_lease_store(
    settings: ArbiterSettings,
    time_provider: TimeProvider | None = None,
) -> LeaseStorePort:
    """Create the consistency store selected by settings.store.

    The configured failover delay seeds the store; a delay already stored by
    an operator takes precedence.

    Args:
        settings: Arbiter settings.
        time_provider: Clock for the store. Defaults to the system clock.

    Raises:
        RaftLeaseNotInstalledError: If store type is "raft" and raft-lease
            is not installed.
        HAConfigError: If the store settings are incomplete.

    Example:
        >>> settings = ArbiterSettings(node_name="zabbix-server-1")
        >>> store = create_lease_store(settings)
    """
    store = settings.store

    if store.type == "memory":
        return InMemoryLeaseStore(
            time_provider=time_provider,
            failover_delay=settings.failover_delay,
        )

    if store.type == "sqlite":
        if store.path is None:
            raise HAConfigError("store.path is required for the sqlite store")
        return SQLiteLeaseStore(
            store.path,
            time_provider=time_provider,
            timeout=store.timeout,
            failover_delay=settings.failover_delay,
        )

    if store.raft is None:
        raise HAConfigError("store.raft is required for the raft store")

    # Import raft-lease (optional dependency)
    try:
        from raft_lease import RaftLeaseStore
    except ImportError as exc:
        raise RaftLeaseNotInstalledError() from exc

    result: LeaseStorePort = RaftLeaseStore.from_config(
        store.raft,
        time_provider=time_provider,
        failover_delay=settings.failover_delay,
    )
    return result
