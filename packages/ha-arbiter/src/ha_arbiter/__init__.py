"""ha-arbiter: lease-based active/standby arbitration for HA server clusters."""

__version__ = "0.1.0"

from ha_arbiter.domain.exceptions import HAArbiterError, HAConfigError
from ha_arbiter.domain.settings import ArbiterSettings
from ha_arbiter.usecases.config_parser import ConfigParser
from ha_arbiter.usecases.failover_coordinator import FailoverCoordinator, NodeRole
from ha_arbiter.usecases.heartbeat_loop import HeartbeatLoop

__all__ = [
    "ArbiterSettings",
    "ConfigParser",
    "FailoverCoordinator",
    "HAArbiterError",
    "HAConfigError",
    "HeartbeatLoop",
    "NodeRole",
]
