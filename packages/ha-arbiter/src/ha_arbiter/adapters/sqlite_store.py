"""SQLite implementation of LeaseStorePort.

Nodes share one SQLite database file. Every mutation runs inside a
``BEGIN IMMEDIATE`` transaction, which takes the database write lock before
the current lease is read, so read-decide-write is atomic across processes.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ha_arbiter.adapters.ports import RealTimeProvider, TimeProvider
from ha_arbiter.domain.exceptions import StoreUnavailableError
from ha_arbiter.domain.lease import (
    DEFAULT_FAILOVER_DELAY,
    Lease,
    grant_lease,
    release_lease,
    renew_lease,
)
from ha_arbiter.domain.node import (
    NodeRecord,
    NodeRemoval,
    NodeStatus,
    can_register,
    removal_outcome,
)

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS ha_node (
        name TEXT PRIMARY KEY,
        address TEXT NOT NULL,
        status TEXT NOT NULL,
        last_seen REAL NOT NULL,
        session_id TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ha_lease (
        id INTEGER PRIMARY KEY CHECK (id = 1),
        holder TEXT,
        term INTEGER NOT NULL,
        acquired_at REAL,
        renewed_at REAL,
        ttl REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ha_config (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
)

_FAILOVER_DELAY_KEY = "failover_delay"


class SQLiteLeaseStore:
    """Consistency store backed by a shared SQLite database.

    A new connection is opened per operation so the store can be used from
    the heartbeat thread and request handlers at the same time.

    Attributes:
        path: Database file path.
    """

    def __init__(
        self,
        path: str | Path,
        time_provider: TimeProvider | None = None,
        timeout: float = 5.0,
        failover_delay: float = DEFAULT_FAILOVER_DELAY,
    ) -> None:
        """Initialize the store and create the schema if needed.

        Args:
            path: Database file path. Parent directory must exist.
            time_provider: Clock for lease arithmetic.
            timeout: Seconds to wait for the database write lock.
            failover_delay: Initial failover delay if none is stored yet.

        Raises:
            StoreUnavailableError: If the database cannot be opened.
        """
        self.path = Path(path)
        self._time = time_provider or RealTimeProvider()
        self._timeout = timeout
        self._initialize(failover_delay)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.path), timeout=self._timeout, isolation_level=None
        )
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block inside BEGIN IMMEDIATE ... COMMIT.

        Raises:
            StoreUnavailableError: On any sqlite3 error.
        """
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"cannot open store {self.path}: {e}", original_error=e
            ) from e
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"store {self.path} operation failed: {e}", original_error=e
            ) from e
        finally:
            conn.close()

    def _initialize(self, failover_delay: float) -> None:
        with self._transaction() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
            conn.execute(
                "INSERT OR IGNORE INTO ha_lease (id, holder, term) VALUES (1, NULL, 0)"
            )
            conn.execute(
                "INSERT OR IGNORE INTO ha_config (key, value) VALUES (?, ?)",
                (_FAILOVER_DELAY_KEY, repr(float(failover_delay))),
            )
        logger.debug("Initialized HA store at %s", self.path)

    @staticmethod
    def _row_to_node(row: sqlite3.Row) -> NodeRecord:
        return NodeRecord(
            name=row["name"],
            address=row["address"],
            status=NodeStatus(row["status"]),
            last_seen=row["last_seen"],
            session_id=row["session_id"],
        )

    @staticmethod
    def _read_lease(conn: sqlite3.Connection) -> tuple[Lease | None, int]:
        row = conn.execute(
            "SELECT holder, term, acquired_at, renewed_at, ttl FROM ha_lease WHERE id = 1"
        ).fetchone()
        if row is None:
            return None, 0
        if row["holder"] is None:
            return None, row["term"]
        lease = Lease(
            holder=row["holder"],
            term=row["term"],
            acquired_at=row["acquired_at"],
            renewed_at=row["renewed_at"],
            ttl=row["ttl"],
        )
        return lease, row["term"]

    @staticmethod
    def _write_lease(conn: sqlite3.Connection, lease: Lease) -> None:
        conn.execute(
            "UPDATE ha_lease SET holder = ?, term = ?, acquired_at = ?, "
            "renewed_at = ?, ttl = ? WHERE id = 1",
            (lease.holder, lease.term, lease.acquired_at, lease.renewed_at, lease.ttl),
        )

    @staticmethod
    def _write_node(conn: sqlite3.Connection, record: NodeRecord) -> None:
        conn.execute(
            "INSERT INTO ha_node (name, address, status, last_seen, session_id) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(name) DO UPDATE SET address = excluded.address, "
            "status = excluded.status, last_seen = excluded.last_seen, "
            "session_id = excluded.session_id",
            (
                record.name,
                record.address,
                record.status.value,
                record.last_seen,
                record.session_id,
            ),
        )

    def _read_node(self, conn: sqlite3.Connection, name: str) -> NodeRecord | None:
        row = conn.execute("SELECT * FROM ha_node WHERE name = ?", (name,)).fetchone()
        return self._row_to_node(row) if row is not None else None

    @staticmethod
    def _read_failover_delay(conn: sqlite3.Connection) -> float:
        row = conn.execute(
            "SELECT value FROM ha_config WHERE key = ?", (_FAILOVER_DELAY_KEY,)
        ).fetchone()
        return float(row["value"]) if row is not None else DEFAULT_FAILOVER_DELAY

    def now(self) -> float:
        return self._time.get_time_seconds()

    def upsert_node(self, record: NodeRecord) -> None:
        with self._transaction() as conn:
            self._write_node(conn, record)

    def get_node(self, name: str) -> NodeRecord | None:
        with self._transaction() as conn:
            return self._read_node(conn, name)

    def list_nodes(self) -> list[NodeRecord]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT * FROM ha_node ORDER BY name").fetchall()
        return [self._row_to_node(row) for row in rows]

    def register_node(self, record: NodeRecord) -> bool:
        with self._transaction() as conn:
            existing = self._read_node(conn, record.name)
            if not can_register(existing, record, self._read_failover_delay(conn)):
                return False
            self._write_node(conn, record)
            return True

    def delete_node_if_not_holder(self, name: str) -> NodeRemoval:
        with self._transaction() as conn:
            lease, _ = self._read_lease(conn)
            outcome = removal_outcome(self._read_node(conn, name), lease, self.now())
            if outcome == NodeRemoval.REMOVED:
                conn.execute("DELETE FROM ha_node WHERE name = ?", (name,))
            return outcome

    def acquire_lease(self, candidate: str, ttl: float) -> Lease | None:
        with self._transaction() as conn:
            current, last_term = self._read_lease(conn)
            granted = grant_lease(current, candidate, self.now(), ttl, last_term)
            if granted is not None:
                self._write_lease(conn, granted)
            return granted

    def renew_lease(self, holder: str, term: int) -> Lease | None:
        with self._transaction() as conn:
            current, _ = self._read_lease(conn)
            renewed = renew_lease(current, holder, term, self.now())
            if renewed is not None:
                self._write_lease(conn, renewed)
            return renewed

    def release_lease(self, holder: str, term: int) -> bool:
        with self._transaction() as conn:
            current, _ = self._read_lease(conn)
            if current is None or release_lease(current, holder, term) is not None:
                return False
            conn.execute(
                "UPDATE ha_lease SET holder = NULL, acquired_at = NULL, "
                "renewed_at = NULL, ttl = NULL WHERE id = 1"
            )
            return True

    def get_lease(self) -> Lease | None:
        with self._transaction() as conn:
            lease, _ = self._read_lease(conn)
        return lease

    def get_failover_delay(self) -> float:
        with self._transaction() as conn:
            return self._read_failover_delay(conn)

    def set_failover_delay(self, seconds: float) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO ha_config (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (_FAILOVER_DELAY_KEY, repr(float(seconds))),
            )
