"""Core data models for link management."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class LinkState(Enum):
    """Physical link (carrier) state."""
    UP = "up"
    DOWN = "down"


class ControllerState(Enum):
    """States of the reconciliation state machine."""
    AWAITING_EVENT = "awaiting_event"
    EVALUATING = "evaluating"
    CONFIGURING_LINK = "configuring_link"
    LINK_IDLE = "link_idle"
    VERIFYING = "verifying"
    CONVERGED = "converged"
    ESCALATING = "escalating"
    FATAL_EXIT = "fatal_exit"


def canonical_mac(mac: str) -> str:
    """Normalise a MAC address to lowercase hex without separators."""
    return "".join(c for c in mac.lower() if c not in ":-.")


@dataclass(frozen=True)
class DeviceIdentity:
    """A network device as identified by name and hardware address."""
    name: str
    mac_address: str

    def __post_init__(self):
        object.__setattr__(self, "mac_address", canonical_mac(self.mac_address))


@dataclass(frozen=True)
class DhcpConfig:
    """Address configuration obtained from a DHCP lease."""

    kind = "dhcp"


@dataclass(frozen=True)
class StaticConfig:
    """Fixed address configuration.

    Empty strings mean "not set" for the optional fields.
    """
    ip_address: str
    netmask: str
    gateway: str = ""
    dns_servers: Tuple[str, ...] = ()
    dns_domain: str = ""

    kind = "static"

    def __post_init__(self):
        if len(self.dns_servers) > 2:
            raise ValueError("At most two DNS servers are supported")


NetworkConfig = Union[DhcpConfig, StaticConfig]


@dataclass
class ConnectivityCheck:
    """Result of a connectivity check."""
    target: str
    success: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class InterfaceInfo:
    """Snapshot of a device's current network settings."""
    name: str
    mac_address: Optional[str] = None
    link_state: LinkState = LinkState.DOWN
    ipv4_address: Optional[str] = None
    ipv6_address: Optional[str] = None
    netmask: Optional[str] = None
    gateway: Optional[str] = None
    dns_servers: List[str] = field(default_factory=list)


@dataclass
class ReconciliationAttempt:
    """Per-cycle bookkeeping, rebuilt from live reads for every link event."""
    link_state: Optional[LinkState] = None
    config_applied: bool = False
    verified: bool = False
    retry_count: int = 0
    states: List[ControllerState] = field(default_factory=list)

    @property
    def state(self) -> ControllerState:
        return self.states[-1] if self.states else ControllerState.AWAITING_EVENT
