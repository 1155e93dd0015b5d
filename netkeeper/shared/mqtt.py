"""MQTT configuration and utilities."""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class MQTTConfig:
    """MQTT broker configuration."""
    broker: str = "localhost"
    port: int = 1883
    client_id: str = "netkeeper"
    keepalive: int = 60
    qos: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "MQTTConfig":
        """Create config from dictionary."""
        return cls(
            broker=data.get("broker", "localhost"),
            port=data.get("port", 1883),
            client_id=data.get("client_id", "netkeeper"),
            keepalive=data.get("keepalive", 60),
            qos=data.get("qos", 1),
        )


def create_status_payload(
    fields: Dict[str, Any],
    timestamp: Optional[float] = None,
) -> str:
    """Create a standardized MQTT payload for a status message.

    Args:
        fields: Status fields to publish.
        timestamp: Unix timestamp (defaults to current time).

    Returns:
        JSON string payload.
    """
    payload = dict(fields)
    payload["ts"] = timestamp or time.time()
    return json.dumps(payload)
