"""Imperative changes to a device's network configuration."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Collection, List

from .models import StaticConfig

logger = logging.getLogger(__name__)


class NetworkApplier(ABC):
    """Base class for network configuration actions.

    Every action returns True when all of its OS invocations succeeded.
    Failures are reported, never raised.
    """

    @abstractmethod
    def bring_up(self, device: str) -> bool:
        pass

    @abstractmethod
    def bring_down(self, device: str) -> bool:
        pass

    @abstractmethod
    def apply_static(self, device: str, config: StaticConfig) -> bool:
        """Assign the address, default route and resolvers of a static config."""
        pass

    @abstractmethod
    def apply_dhcp(self, device: str) -> bool:
        """Restart the lease client in the background."""
        pass

    @abstractmethod
    def flush(self, device: str) -> bool:
        """Stop the lease client and remove every address from the device."""
        pass


class CommandApplier(NetworkApplier):
    """Applier that shells out to iproute2 and dhclient."""

    def __init__(
        self,
        dhcp_client: str = "dhclient",
        resolv_conf: str = "/etc/resolv.conf",
        command_timeout: float = 30.0,
    ):
        self.dhcp_client = dhcp_client
        self.resolv_conf = Path(resolv_conf)
        self.command_timeout = command_timeout

    def _run(self, args: List[str], ok_codes: Collection[int] = (0,)) -> bool:
        """Run a command, logging and returning whether it succeeded."""
        logger.debug(f"CMD: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Command timed out: {' '.join(args)}")
            return False
        except OSError as e:
            logger.error(f"Cannot run {args[0]}: {e}")
            return False

        if result.returncode not in ok_codes:
            logger.warning(
                f"Command {' '.join(args)} returned {result.returncode}: "
                f"{result.stderr.strip()}"
            )
            return False
        return True

    def bring_up(self, device: str) -> bool:
        return self._run(["ip", "link", "set", device, "up"])

    def bring_down(self, device: str) -> bool:
        return self._run(["ip", "link", "set", device, "down"])

    def stop_lease_client(self, device: str) -> bool:
        # pkill exits 1 when nothing matched
        return self._run(["pkill", "-f", f"{self.dhcp_client}.*{device}"], ok_codes=(0, 1))

    def write_resolv_conf(self, config: StaticConfig) -> bool:
        lines = [f"nameserver {server}" for server in config.dns_servers]
        if config.dns_domain:
            lines.append(f"search {config.dns_domain}")
        logger.info(f"Writing {self.resolv_conf}")
        try:
            self.resolv_conf.write_text("\n".join(lines) + "\n")
        except OSError as e:
            logger.error(f"Unable to write DNS servers to {self.resolv_conf}: {e}")
            return False
        return True

    def apply_static(self, device: str, config: StaticConfig) -> bool:
        logger.info(f"Applying static configuration {config.ip_address}/{config.netmask} to {device}")
        ok = self.bring_up(device)
        ok &= self._run(
            ["ip", "addr", "add", f"{config.ip_address}/{config.netmask}", "dev", device]
        )
        if config.gateway:
            ok &= self._run(
                ["ip", "route", "add", "default", "via", config.gateway, "dev", device]
            )
        if config.dns_servers:
            ok &= self.write_resolv_conf(config)
        return ok

    def apply_dhcp(self, device: str) -> bool:
        logger.info(f"Starting {self.dhcp_client} on {device}")
        ok = self.stop_lease_client(device)
        ok &= self.bring_up(device)
        # -nw: go to the background immediately instead of waiting for a lease
        ok &= self._run([self.dhcp_client, "-nw", device])
        return ok

    def flush(self, device: str) -> bool:
        logger.info(f"Removing network configuration from {device}")
        ok = self.stop_lease_client(device)
        ok &= self._run(["ip", "addr", "flush", "dev", device])
        return ok
