"""Configuration for the link manager service."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from netkeeper.shared.config import get_config_path, load_yaml_config
from netkeeper.shared.mqtt import MQTTConfig

logger = logging.getLogger(__name__)


@dataclass
class LinkManagerConfig:
    """Configuration for link reconciliation."""

    # Managed device
    device: str = "eth0"
    static_config_path: str = "network.conf"
    record_dir: str = "./netcfg"

    # Connectivity verification
    probe_target: str = "8.8.8.8"
    probe_timeout: float = 2.0  # seconds
    max_attempts: int = 10
    retry_delay: float = 10.0  # seconds between failed probes
    escalation_settle: float = 10.0  # seconds after reconfiguring
    link_settle: float = 1.0  # seconds before reading the carrier

    # System integration
    dhcp_client: str = "dhclient"
    resolv_conf: str = "/etc/resolv.conf"
    sysfs_root: str = "/sys/class/net"
    require_root: bool = True

    # MQTT settings
    enable_notifications: bool = True
    mqtt: MQTTConfig = field(default_factory=MQTTConfig)
    mqtt_topic: str = "netkeeper/link"

    # Logging, 0 (errors only) to 3 (everything)
    debug_level: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "LinkManagerConfig":
        """Create config from dictionary."""
        mqtt_data = data.get("mqtt", {})

        return cls(
            device=data.get("device", "eth0"),
            static_config_path=data.get("static_config_path", "network.conf"),
            record_dir=data.get("record_dir", "./netcfg"),
            probe_target=data.get("probe_target", "8.8.8.8"),
            probe_timeout=data.get("probe_timeout", 2.0),
            max_attempts=data.get("max_attempts", 10),
            retry_delay=data.get("retry_delay", 10.0),
            escalation_settle=data.get("escalation_settle", 10.0),
            link_settle=data.get("link_settle", 1.0),
            dhcp_client=data.get("dhcp_client", "dhclient"),
            resolv_conf=data.get("resolv_conf", "/etc/resolv.conf"),
            sysfs_root=data.get("sysfs_root", "/sys/class/net"),
            require_root=data.get("require_root", True),
            enable_notifications=data.get("enable_notifications", True),
            mqtt=MQTTConfig.from_dict(mqtt_data),
            mqtt_topic=data.get("mqtt_topic", "netkeeper/link"),
            debug_level=data.get("debug_level", 1),
        )


def load_config(config_path: Optional[str] = None) -> LinkManagerConfig:
    """Load configuration from YAML file or environment.

    Args:
        config_path: Path to YAML config file. If not provided,
                    looks for NETKEEPER_CONFIG env var,
                    then falls back to default config.

    Returns:
        LinkManagerConfig instance.
    """
    load_dotenv()

    path = get_config_path(config_path)
    if path and path.exists():
        return LinkManagerConfig.from_dict(load_yaml_config(path, load_env=False))

    # Environment variable overrides
    config = LinkManagerConfig()

    if device := os.environ.get("NETKEEPER_DEVICE"):
        config.device = device
    if static_path := os.environ.get("NETKEEPER_STATIC_CONFIG"):
        config.static_config_path = static_path
    if record_dir := os.environ.get("NETKEEPER_RECORD_DIR"):
        config.record_dir = record_dir
    if debug := os.environ.get("NETKEEPER_DEBUG"):
        try:
            config.debug_level = int(debug)
        except ValueError:
            logger.warning(
                f"Invalid NETKEEPER_DEBUG value {debug!r}, using {config.debug_level}"
            )
    if mqtt_broker := os.environ.get("MQTT_BROKER"):
        config.mqtt.broker = mqtt_broker

    return config
