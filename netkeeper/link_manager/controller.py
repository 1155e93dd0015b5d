"""Link-state reconciliation controller.

Each link event runs one reconciliation cycle:

    AWAITING_EVENT -> EVALUATING -> LINK_IDLE                       (link down)
    AWAITING_EVENT -> EVALUATING -> CONFIGURING_LINK -> VERIFYING
        -> CONVERGED                                               (reachable)
        -> ESCALATING -> CONVERGED | FATAL_EXIT                    (unreachable)

Verification makes up to ``max_attempts`` probes with a fixed delay between
failures. When they all fail the device is flushed and reconfigured once,
followed by a single probe; if that probe fails too the controller gives up
and raises ReconfigurationExhausted.
"""

import logging
import time
from typing import Callable, Iterable, Optional

from .applier import NetworkApplier
from .config import LinkManagerConfig
from .errors import (
    ConfigWriteFailed,
    DeviceNotFound,
    ReconfigurationExhausted,
)
from .events import LinkEvent
from .inspector import InterfaceInspector
from .models import (
    ControllerState,
    DeviceIdentity,
    LinkState,
    NetworkConfig,
    ReconciliationAttempt,
    StaticConfig,
)
from .notifier import StatusNotifier
from .store import ConfigurationStore, render_record

logger = logging.getLogger(__name__)


class ReconciliationController:
    """Converges one device to a configured, reachable state."""

    def __init__(
        self,
        config: LinkManagerConfig,
        identity: DeviceIdentity,
        network_config: NetworkConfig,
        inspector: InterfaceInspector,
        applier: NetworkApplier,
        store: ConfigurationStore,
        notifier: Optional[StatusNotifier] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.identity = identity
        self.network_config = network_config
        self.inspector = inspector
        self.applier = applier
        self.store = store
        self.notifier = notifier
        self._sleep = sleep

    @property
    def device(self) -> str:
        return self.identity.name

    def _transition(self, attempt: ReconciliationAttempt, state: ControllerState) -> None:
        attempt.states.append(state)
        logger.debug(f"{self.device}: -> {state.value}")
        if self.notifier:
            self.notifier.publish_state(self.device, state, attempt)

    def run(self, events: Iterable[LinkEvent]) -> None:
        """Reconcile once per event, strictly in arrival order.

        Returns when the event source ends. ReconfigurationExhausted and
        DeviceNotFound propagate to the caller.
        """
        for event in events:
            if not event.initial:
                logger.info(f"Link state change detected for {self.device}")
            self.reconcile()

    def reconcile(self) -> ReconciliationAttempt:
        """Run one full reconciliation cycle against live device state."""
        attempt = ReconciliationAttempt()

        if self.config.link_settle > 0:
            self._sleep(self.config.link_settle)

        self._transition(attempt, ControllerState.EVALUATING)
        attempt.link_state = self.inspector.read_link_state(self.device)

        if attempt.link_state is LinkState.DOWN:
            logger.info(f"Link {self.device}: DOWN")
            self._transition(attempt, ControllerState.LINK_IDLE)
            if not self.applier.flush(self.device):
                logger.warning(f"Flushing {self.device} did not complete cleanly")
            self._transition(attempt, ControllerState.AWAITING_EVENT)
            return attempt

        logger.info(f"Link {self.device}: UP")
        self._transition(attempt, ControllerState.CONFIGURING_LINK)
        self._persist_config()
        attempt.config_applied = self._apply_config()

        self._transition(attempt, ControllerState.VERIFYING)
        if self._verify(attempt):
            self._converge(attempt)
            return attempt

        self._transition(attempt, ControllerState.ESCALATING)
        self._escalate(attempt)
        self._converge(attempt)
        return attempt

    def _persist_config(self) -> None:
        """Make the persisted record match the selected configuration.

        Store failures are logged; reconciliation continues without them.
        """
        desired = render_record(self.device, self.network_config)
        try:
            current = self.store.read(self.identity)
            if current == desired:
                logger.debug(f"{self.device} already configured, keeping record")
                return
            if current is None:
                logger.info(f"{self.device} not configured, creating configuration")
                self.store.write(self.identity, self.network_config)
            else:
                logger.info(f"Configuration of {self.device} changed, recreating record")
                self.store.replace(self.identity, self.network_config)
        except (ConfigWriteFailed, OSError) as e:
            logger.error(f"Error persisting configuration for {self.device}: {e}")

    def _apply_config(self) -> bool:
        if isinstance(self.network_config, StaticConfig):
            ok = self.applier.apply_static(self.device, self.network_config)
        else:
            ok = self.applier.apply_dhcp(self.device)
        if not ok:
            logger.warning(f"Applying configuration to {self.device} partially failed")
        return ok

    def _verify(self, attempt: ReconciliationAttempt) -> bool:
        """Probe the target up to max_attempts times, stopping on success."""
        target = self.config.probe_target
        max_attempts = self.config.max_attempts
        logger.info(f"Checking connectivity to {target}...")

        while attempt.retry_count < max_attempts:
            if self.inspector.probe_reachable(target):
                logger.info(f"Connectivity verified: {target} reachable")
                attempt.verified = True
                return True

            attempt.retry_count += 1
            if attempt.retry_count < max_attempts:
                logger.warning(
                    f"Attempt {attempt.retry_count}/{max_attempts} failed: {target} "
                    f"unreachable, retrying in {self.config.retry_delay:g}s"
                )
                self._sleep(self.config.retry_delay)

        logger.error(
            f"{target} unreachable after {max_attempts} attempts, reconfiguring {self.device}"
        )
        return False

    def _escalate(self, attempt: ReconciliationAttempt) -> None:
        """Flush, reapply and probe once. Raises if still unreachable."""
        target = self.config.probe_target
        if not self.applier.flush(self.device):
            logger.warning(f"Flushing {self.device} did not complete cleanly")
        attempt.config_applied = self._apply_config()

        self._sleep(self.config.escalation_settle)
        if self.inspector.probe_reachable(target):
            logger.info(f"Reconfiguration succeeded: {target} now reachable")
            attempt.verified = True
            return

        logger.error(f"Reconfiguration failed: {target} still unreachable")
        self._transition(attempt, ControllerState.FATAL_EXIT)
        raise ReconfigurationExhausted(self.device, target)

    def _converge(self, attempt: ReconciliationAttempt) -> None:
        self._transition(attempt, ControllerState.CONVERGED)
        try:
            info = self.inspector.read_info(self.device)
            logger.info(
                f"{self.device} converged: address={info.ipv4_address or '--'} "
                f"netmask={info.netmask or '--'} gateway={info.gateway or '--'}"
            )
        except DeviceNotFound as e:
            logger.warning(f"Could not read interface details: {e}")
        self._transition(attempt, ControllerState.AWAITING_EVENT)
