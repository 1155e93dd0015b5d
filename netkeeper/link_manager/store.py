"""Per-device persisted configuration records.

A record lives at ``{record_dir}/{device}-{mac}.conf`` and uses the
ifupdown ``iface`` stanza format. Existence of the record is what marks a
device as already configured. Records are never edited in place: a changed
configuration stages a complete new record and then swaps it in.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import ConfigRemoveFailed, ConfigWriteFailed
from .models import DeviceIdentity, DhcpConfig, NetworkConfig, StaticConfig

logger = logging.getLogger(__name__)

STATIC_HEADER = "# STATIC Configuration"
DHCP_HEADER = "# DHCP Configuration"


def render_record(device: str, config: NetworkConfig) -> str:
    """Render the record body for a configuration."""
    if isinstance(config, StaticConfig):
        lines = [STATIC_HEADER, f"iface {device} inet static"]
        options = [
            ("address", config.ip_address),
            ("netmask", config.netmask),
            ("gateway", config.gateway),
            ("dns-domain", config.dns_domain),
            ("dns-nameserver", " ".join(config.dns_servers)),
        ]
        lines.extend(f"\t{name} {value}" for name, value in options if value)
    else:
        lines = [DHCP_HEADER, f"iface {device} inet dhcp"]
    return "\n".join(lines) + "\n"


def parse_record(text: str) -> Optional[NetworkConfig]:
    """Parse a record body back into a configuration.

    Returns None if the body has no recognisable ``iface`` stanza.
    """
    method = None
    options: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        words = line.split()
        if words[0] == "iface" and len(words) >= 4:
            method = words[3]
        elif method is not None and len(words) >= 2:
            options[words[0]] = " ".join(words[1:])

    if method == "dhcp":
        return DhcpConfig()
    if method != "static" or not options.get("address"):
        return None

    return StaticConfig(
        ip_address=options["address"],
        netmask=options.get("netmask", ""),
        gateway=options.get("gateway", ""),
        dns_servers=tuple(options.get("dns-nameserver", "").split()[:2]),
        dns_domain=options.get("dns-domain", ""),
    )


class ConfigurationStore:
    """File-backed store of persisted configuration records."""

    def __init__(self, record_dir: Union[str, Path]):
        self.record_dir = Path(record_dir)

    def path_for(self, identity: DeviceIdentity) -> Path:
        return self.record_dir / f"{identity.name}-{identity.mac_address}.conf"

    def exists(self, identity: DeviceIdentity) -> bool:
        return self.path_for(identity).is_file()

    def read(self, identity: DeviceIdentity) -> Optional[str]:
        """Return the raw record body, or None if there is no record."""
        try:
            return self.path_for(identity).read_text()
        except FileNotFoundError:
            return None

    def load(self, identity: DeviceIdentity) -> Optional[NetworkConfig]:
        """Return the configuration stored for a device, if any."""
        try:
            text = self.read(identity)
        except OSError as e:
            logger.warning(f"Cannot read record for {identity.name}: {e}")
            return None
        if text is None:
            return None
        config = parse_record(text)
        if config is None:
            logger.warning(f"Ignoring unparseable record {self.path_for(identity)}")
        return config

    def _stage(self, path: Path, body: str) -> str:
        """Write a complete body to a temporary file beside ``path``."""
        try:
            self.record_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=self.record_dir
            )
        except OSError as e:
            raise ConfigWriteFailed(f"Cannot create record {path}: {e}")

        try:
            with os.fdopen(fd, "w") as f:
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self._discard(tmp_name)
            raise ConfigWriteFailed(f"Cannot write record {path}: {e}")
        return tmp_name

    def _discard(self, tmp_name: str) -> None:
        try:
            os.unlink(tmp_name)
        except OSError as e:
            logger.warning(f"Cannot remove temporary file {tmp_name}: {e}")

    def _commit(self, tmp_name: str, path: Path) -> None:
        try:
            os.replace(tmp_name, path)
        except OSError as e:
            self._discard(tmp_name)
            raise ConfigWriteFailed(f"Cannot write record {path}: {e}")

    def write(self, identity: DeviceIdentity, config: NetworkConfig) -> None:
        """Create the record for a device.

        The body is staged in a temporary file next to the record and moved
        into place only once complete.

        Raises:
            ConfigWriteFailed: If a record already exists or cannot be created.
        """
        path = self.path_for(identity)
        if path.exists():
            raise ConfigWriteFailed(f"Record {path} already exists")

        tmp_name = self._stage(path, render_record(identity.name, config))
        self._commit(tmp_name, path)
        logger.info(f"Created configuration record {path}")

    def replace(self, identity: DeviceIdentity, config: NetworkConfig) -> None:
        """Swap a device's record for a new one.

        The new body is complete on disk before the old record is touched,
        so a failed create leaves the previous record in place.

        Raises:
            ConfigWriteFailed: If the new record cannot be created.
        """
        path = self.path_for(identity)
        tmp_name = self._stage(path, render_record(identity.name, config))
        self._commit(tmp_name, path)
        logger.info(f"Replaced configuration record {path}")

    def remove(self, identity: DeviceIdentity) -> None:
        """Delete the record for a device. Missing records are ignored.

        Raises:
            ConfigRemoveFailed: If the record exists but cannot be deleted.
        """
        path = self.path_for(identity)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise ConfigRemoveFailed(f"Cannot remove record {path}: {e}")
        logger.info(f"Removed configuration record {path}")

