"""Parser for the optional KEY=VALUE static address override file."""

import ipaddress
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import StaticConfigError
from .models import StaticConfig

logger = logging.getLogger(__name__)

KNOWN_KEYS = ("IP_ADDR", "NETMASK", "GATEWAY", "DNS1", "DNS2", "DNS_DOMAIN")


def parse_static_lines(text: str) -> Dict[str, str]:
    """Extract recognised KEY=VALUE pairs from the file contents."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key not in KNOWN_KEYS:
            logger.debug(f"Ignoring unknown key {key!r}")
            continue
        values[key] = value.strip()
    return values


def _require_ipv4(values: Dict[str, str], key: str) -> str:
    value = values.get(key, "")
    if not value:
        raise StaticConfigError(f"{key} is required for a static configuration")
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        raise StaticConfigError(f"{key}={value!r} is not a valid IPv4 address")
    return value


def _check_netmask(value: str) -> str:
    if not value:
        raise StaticConfigError("NETMASK is required for a static configuration")
    try:
        # Accepts both dotted masks and prefix lengths
        ipaddress.IPv4Network(f"0.0.0.0/{value}")
    except ValueError:
        raise StaticConfigError(f"NETMASK={value!r} is not a valid netmask")
    return value


def load_static_config(path: Union[str, Path]) -> Optional[StaticConfig]:
    """Load the static override file.

    Args:
        path: Location of the KEY=VALUE file.

    Returns:
        StaticConfig built from the file, or None if the file does not exist.

    Raises:
        StaticConfigError: If the file exists but lacks a usable address.
    """
    path = Path(path)
    try:
        text = path.read_text()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StaticConfigError(f"Cannot read {path}: {e}")

    values = parse_static_lines(text)
    ip_address = _require_ipv4(values, "IP_ADDR")
    netmask = _check_netmask(values.get("NETMASK", ""))
    gateway = values.get("GATEWAY", "")
    if gateway:
        _require_ipv4(values, "GATEWAY")

    dns_servers = tuple(
        values[key] for key in ("DNS1", "DNS2") if values.get(key)
    )

    return StaticConfig(
        ip_address=ip_address,
        netmask=netmask,
        gateway=gateway,
        dns_servers=dns_servers,
        dns_domain=values.get("DNS_DOMAIN", ""),
    )
