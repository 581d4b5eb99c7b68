"""Raft-replicated implementation of LeaseStorePort.

RaftLeaseStore implements LeaseStorePort from ha-arbiter on top of PySyncObj.
No shared database is needed: the HA nodes themselves form a Raft group and
a lease command only takes effect once a majority has committed it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pysyncobj import SyncObjException

from ha_arbiter.adapters.ports import RealTimeProvider, TimeProvider
from ha_arbiter.domain.exceptions import StoreUnavailableError
from ha_arbiter.domain.lease import DEFAULT_FAILOVER_DELAY
from raft_lease._raft_node import ReplicatedLeaseTable, create_sync_obj

if TYPE_CHECKING:
    from pysyncobj import SyncObj

    from ha_arbiter.domain.lease import Lease
    from ha_arbiter.domain.node import NodeRecord, NodeRemoval
    from ha_arbiter.domain.settings import RaftStoreConfig

logger = logging.getLogger(__name__)


class RaftLeaseStore:
    """Consistency store replicated between the HA nodes by Raft.

    Writes wait for the command to commit on a majority. A node cut off from
    the majority cannot commit, so its writes time out and raise
    StoreUnavailableError, which makes an isolated active node fence itself.

    The clock is the local host's. Each mutation carries the caller's
    reading so every replica applies the same decision.

    Attributes:
        commit_timeout: Seconds to wait for a command to commit.
    """

    def __init__(
        self,
        table: ReplicatedLeaseTable,
        time_provider: TimeProvider | None = None,
        commit_timeout: float = 5.0,
        failover_delay: float = DEFAULT_FAILOVER_DELAY,
        sync_obj: SyncObj | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            table: Replicated lease table attached to a running SyncObj.
            time_provider: Clock used for lease arithmetic.
            commit_timeout: Seconds to wait for each replicated command.
            failover_delay: Delay reported until an operator sets one.
            sync_obj: Raft node to destroy on close(), if owned by the store.
        """
        if commit_timeout <= 0:
            raise ValueError("commit_timeout must be > 0")
        self._table = table
        self._time = time_provider or RealTimeProvider()
        self.commit_timeout = commit_timeout
        self._default_failover_delay = failover_delay
        self._sync_obj = sync_obj

    @classmethod
    def from_config(
        cls,
        config: RaftStoreConfig,
        time_provider: TimeProvider | None = None,
        failover_delay: float = DEFAULT_FAILOVER_DELAY,
        journal_file: str | None = None,
    ) -> RaftLeaseStore:
        """Start a Raft node from RaftStoreConfig and wrap it in a store."""
        table = ReplicatedLeaseTable()
        sync_obj = create_sync_obj(
            config.self_addr,
            list(config.partners),
            table,
            journal_file=journal_file,
        )
        logger.info(
            "Started Raft lease store at %s with partners %s",
            config.self_addr,
            ", ".join(config.partners),
        )
        return cls(
            table,
            time_provider=time_provider,
            commit_timeout=config.commit_timeout,
            failover_delay=failover_delay,
            sync_obj=sync_obj,
        )

    def _commit(self, command: str, *args: Any) -> Any:
        try:
            method = getattr(self._table, command)
            return method(*args, sync=True, timeout=self.commit_timeout)
        except SyncObjException as e:
            raise StoreUnavailableError(
                f"Raft command {command} did not commit: {e.errorCode}",
                original_error=e,
            ) from e

    def now(self) -> float:
        return self._time.get_time_seconds()

    def upsert_node(self, record: NodeRecord) -> None:
        self._commit("upsert_node", record)

    def get_node(self, name: str) -> NodeRecord | None:
        return self._table.get_node(name)

    def list_nodes(self) -> list[NodeRecord]:
        return self._table.list_nodes()

    def register_node(self, record: NodeRecord) -> bool:
        return bool(
            self._commit("register_node", record, self._default_failover_delay)
        )

    def delete_node_if_not_holder(self, name: str) -> NodeRemoval:
        result: NodeRemoval = self._commit(
            "delete_node_if_not_holder", name, self.now()
        )
        return result

    def acquire_lease(self, candidate: str, ttl: float) -> Lease | None:
        result: Lease | None = self._commit("acquire", candidate, ttl, self.now())
        return result

    def renew_lease(self, holder: str, term: int) -> Lease | None:
        result: Lease | None = self._commit("renew", holder, term, self.now())
        return result

    def release_lease(self, holder: str, term: int) -> bool:
        return bool(self._commit("release", holder, term))

    def get_lease(self) -> Lease | None:
        return self._table.get_lease()

    def get_failover_delay(self) -> float:
        delay = self._table.get_failover_delay()
        return self._default_failover_delay if delay is None else delay

    def set_failover_delay(self, seconds: float) -> None:
        self._commit("set_failover_delay", seconds)

    def close(self) -> None:
        """Stop the Raft node owned by this store."""
        if self._sync_obj is not None:
            self._sync_obj.destroy()
            self._sync_obj = None
