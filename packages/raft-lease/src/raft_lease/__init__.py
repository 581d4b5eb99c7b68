"""raft-lease: Raft-replicated lease store for ha-arbiter.

Provides RaftLeaseStore, a LeaseStorePort implementation built on PySyncObj
so HA nodes can arbitrate without an external database.
"""

from .lease_table import LeaseTable
from .raft_store import RaftLeaseStore

__all__ = ["LeaseTable", "RaftLeaseStore"]
__version__ = "0.1.0"
