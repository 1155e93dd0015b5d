"""Read-only queries of a network device's state."""

import ipaddress
import logging
import re
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import DeviceNotFound
from .models import ConnectivityCheck, DeviceIdentity, InterfaceInfo, LinkState

logger = logging.getLogger(__name__)

SYSFS_NET = "/sys/class/net"
RESOLV_CONF = "/etc/resolv.conf"

_ETHER_RE = re.compile(r"link/ether\s+([0-9a-fA-F:]{17})")
_INET_RE = re.compile(r"\binet6?\s+([^\s/]+)/(\d+)")


class InterfaceInspector(ABC):
    """Base class for device state queries."""

    @abstractmethod
    def read_link_state(self, device: str) -> LinkState:
        """Read the carrier bit. A missing carrier reads as DOWN."""
        pass

    @abstractmethod
    def read_identity(self, device: str) -> DeviceIdentity:
        """Resolve the device's name and MAC address."""
        pass

    @abstractmethod
    def probe_reachable(self, host: str, attempts: int = 1) -> bool:
        """Send echo probes to a host; True iff a reply came back."""
        pass

    @abstractmethod
    def read_info(self, device: str) -> InterfaceInfo:
        """Snapshot the device's current addresses, gateway and DNS."""
        pass


class SystemInspector(InterfaceInspector):
    """Inspector backed by sysfs, the resolver file and iproute2."""

    def __init__(
        self,
        sysfs_root: str = SYSFS_NET,
        resolv_conf: str = RESOLV_CONF,
        probe_timeout: float = 2.0,
        command_timeout: float = 10.0,
    ):
        self.sysfs_root = Path(sysfs_root)
        self.resolv_conf = Path(resolv_conf)
        self.probe_timeout = probe_timeout
        self.command_timeout = command_timeout

    def carrier_path(self, device: str) -> Path:
        return self.sysfs_root / device / "carrier"

    def _query(self, args: List[str]) -> Tuple[int, str]:
        """Run a query command, returning (returncode, stdout)."""
        logger.debug(f"CMD: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error(f"Command {args[0]} failed: {e}")
            return -1, ""
        if result.returncode != 0:
            logger.debug(f"{args[0]} returned {result.returncode}: {result.stderr.strip()}")
        return result.returncode, result.stdout

    def read_link_state(self, device: str) -> LinkState:
        path = self.carrier_path(device)
        try:
            carrier = path.read_text().strip()
        except FileNotFoundError:
            logger.error(f"No {path} file present")
            return LinkState.DOWN
        except OSError as e:
            # The kernel refuses to report carrier for a device that is down
            logger.debug(f"Cannot read {path}: {e}")
            return LinkState.DOWN

        logger.debug(f"Link from sysfs {path} is {carrier!r}")
        return LinkState.UP if carrier == "1" else LinkState.DOWN

    def read_identity(self, device: str) -> DeviceIdentity:
        returncode, output = self._query(["ip", "-o", "link", "show", "dev", device])
        if returncode != 0:
            raise DeviceNotFound(device, "ip link show failed")

        match = _ETHER_RE.search(output)
        if not match:
            logger.error(f"No ether address reported for {device}")
            raise DeviceNotFound(device, "no ethernet hardware address")
        return DeviceIdentity(name=device, mac_address=match.group(1))

    def probe(self, host: str, attempts: int = 1) -> ConnectivityCheck:
        """Ping a host and return connectivity check result."""
        timeout = max(int(self.probe_timeout), 1)
        try:
            start = time.time()
            result = subprocess.run(
                ["ping", "-c", str(attempts), "-W", str(timeout), host],
                capture_output=True,
                timeout=attempts * (timeout + 1),
            )
            latency = (time.time() - start) * 1000

            if result.returncode == 0:
                return ConnectivityCheck(
                    target=host,
                    success=True,
                    latency_ms=latency,
                )
            else:
                return ConnectivityCheck(
                    target=host,
                    success=False,
                    error=f"ping returned {result.returncode}",
                )
        except subprocess.TimeoutExpired:
            return ConnectivityCheck(
                target=host,
                success=False,
                error="timeout",
            )
        except OSError as e:
            return ConnectivityCheck(
                target=host,
                success=False,
                error=str(e),
            )

    def probe_reachable(self, host: str, attempts: int = 1) -> bool:
        check = self.probe(host, attempts)
        if check.success:
            logger.debug(f"{host} answered in {check.latency_ms:.0f} ms")
        else:
            logger.debug(f"Unable to reach {host}: {check.error}")
        return check.success

    def _read_address(self, device: str, family: str) -> Tuple[Optional[str], Optional[int]]:
        args = ["ip", "-o", family, "addr", "show", "dev", device]
        if family == "-4":
            args += ["scope", "global"]
        returncode, output = self._query(args)
        if returncode != 0:
            return None, None
        match = _INET_RE.search(output)
        if not match:
            return None, None
        return match.group(1), int(match.group(2))

    def _read_gateway(self, device: str) -> Optional[str]:
        returncode, output = self._query(["ip", "route", "show", "dev", device])
        if returncode != 0:
            return None
        for line in output.splitlines():
            words = line.split()
            if words[:2] == ["default", "via"] and len(words) > 2:
                return words[2]
        return None

    def _read_dns_servers(self) -> List[str]:
        """Return at most two nameservers from the resolver file."""
        try:
            text = self.resolv_conf.read_text()
        except OSError as e:
            logger.debug(f"No DNS configured: {e}")
            return []
        servers = []
        for line in text.splitlines():
            words = line.split()
            if len(words) >= 2 and words[0] == "nameserver":
                servers.append(words[1])
            if len(servers) == 2:
                break
        return servers

    def read_info(self, device: str) -> InterfaceInfo:
        identity = self.read_identity(device)
        ipv4, prefix = self._read_address(device, "-4")
        ipv6, _ = self._read_address(device, "-6")
        netmask = None
        if prefix is not None:
            netmask = str(ipaddress.IPv4Network(f"0.0.0.0/{prefix}").netmask)

        return InterfaceInfo(
            name=device,
            mac_address=identity.mac_address or None,
            link_state=self.read_link_state(device),
            ipv4_address=ipv4,
            ipv6_address=ipv6,
            netmask=netmask,
            gateway=self._read_gateway(device),
            dns_servers=self._read_dns_servers(),
        )
