"""Domain exceptions.

Exception hierarchy:
- HAArbiterError: Base for every error raised by the coordinator.
  - HAConfigError: Invalid configuration (settings, YAML, bounds).
  - StoreUnavailableError: The consistency store could not be reached.
  - LeaseLostError: A lease renewal was rejected by the store.
  - NodeAlreadyRunningError: Another live process uses this node name.
  - NodeNotFoundError: An operation named an unknown node.
  - NodeRemovalError: An operator tried to remove the live active node.
"""

from __future__ import annotations


class HAArbiterError(Exception):
    """Base exception for all HA arbiter errors.

    Framework adapters (FastAPI, CLI) catch this and translate it to
    HTTP status codes or process exit codes.
    """

    pass


class HAConfigError(HAArbiterError):
    """Raised when HA arbiter configuration is invalid.

    This is the base exception for all domain-level configuration errors.
    It is raised by domain entities (e.g., ArbiterSettings) and use cases
    (e.g., ConfigParser, LeaseManager.set_failover_delay) when validation fails.
    """

    pass


class StoreUnavailableError(HAArbiterError):
    """Raised when the consistency store cannot be reached.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying exception that caused the failure (optional).
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize StoreUnavailableError.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class LeaseLostError(HAArbiterError):
    """Raised when renewing a lease that expired or moved to another holder."""

    def __init__(self, holder: str, term: int) -> None:
        super().__init__(f"lease term {term} is no longer held by {holder!r}")
        self.holder = holder
        self.term = term


class NodeAlreadyRunningError(HAArbiterError):
    """Raised when a live node with the same name runs under another session."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"found live node with the same name {name!r}; "
            "stop it or wait for the failover delay before starting another"
        )
        self.name = name


class NodeNotFoundError(HAArbiterError):
    """Raised when an operation names a node the registry does not know."""

    def __init__(self, name: str) -> None:
        super().__init__(f"node {name!r} not found")
        self.name = name


class NodeRemovalError(HAArbiterError):
    """Raised when removing a node that currently holds the active lease."""

    def __init__(self, name: str) -> None:
        super().__init__(f"cannot remove active node {name!r}")
        self.name = name
