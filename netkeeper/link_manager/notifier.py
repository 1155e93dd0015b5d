"""Outbound status notifications over MQTT."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from netkeeper.shared.mqtt import MQTTConfig, create_status_payload

from .models import ControllerState, ReconciliationAttempt

logger = logging.getLogger(__name__)


class StatusNotifier(ABC):
    """Receives every controller state transition."""

    @abstractmethod
    def publish_state(
        self, device: str, state: ControllerState, attempt: ReconciliationAttempt
    ) -> None:
        pass


class MQTTStatusNotifier(StatusNotifier):
    """Publishes controller state to an MQTT broker.

    Broker problems never reach the controller: a notifier that could not
    connect simply drops messages.
    """

    def __init__(self, config: MQTTConfig, topic: str = "netkeeper/link"):
        self.config = config
        self.topic = topic
        self.client: Optional[mqtt.Client] = None

    def connect(self) -> bool:
        """Set up MQTT client for publishing status."""
        client = mqtt.Client(
            callback_api_version=CallbackAPIVersion.VERSION2,
            client_id=self.config.client_id,
        )

        def on_connect(client, userdata, flags, reason_code, properties):
            if reason_code == 0:
                logger.info("Connected to MQTT broker")
            else:
                logger.error(f"MQTT connection failed: {reason_code}")

        def on_disconnect(client, userdata, flags, reason_code, properties):
            logger.warning(f"Disconnected from MQTT broker: {reason_code}")

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect

        try:
            client.connect(
                self.config.broker,
                self.config.port,
                self.config.keepalive,
            )
            client.loop_start()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            return False

        self.client = client
        return True

    def publish_state(
        self, device: str, state: ControllerState, attempt: ReconciliationAttempt
    ) -> None:
        if not self.client:
            return

        topic = f"{self.topic}/{device}"
        payload = create_status_payload({
            "device": device,
            "state": state.value,
            "link_state": attempt.link_state.value if attempt.link_state else None,
            "retry_count": attempt.retry_count,
            "config_applied": attempt.config_applied,
            "verified": attempt.verified,
        })
        self.client.publish(topic, payload, qos=self.config.qos)
        self.client.publish(f"{topic}/state", state.value, qos=self.config.qos, retain=True)
        logger.debug(f"Published state {state.value} to {topic}")

    def close(self) -> None:
        if self.client:
            self.client.loop_stop()
            self.client.disconnect()
            self.client = None
