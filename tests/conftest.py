"""
Pytest configuration and shared fakes for netkeeper tests
"""
import logging
from typing import List, Sequence

import pytest

from netkeeper.link_manager.applier import NetworkApplier
from netkeeper.link_manager.config import LinkManagerConfig
from netkeeper.link_manager.errors import DeviceNotFound
from netkeeper.link_manager.inspector import InterfaceInspector
from netkeeper.link_manager.models import (
    ControllerState,
    DeviceIdentity,
    InterfaceInfo,
    LinkState,
    ReconciliationAttempt,
    StaticConfig,
)
from netkeeper.link_manager.notifier import StatusNotifier
from netkeeper.link_manager.store import ConfigurationStore


class FakeInspector(InterfaceInspector):
    """In-memory inspector with scripted link states and probe results."""

    def __init__(
        self,
        link_states: Sequence[LinkState] = (LinkState.UP,),
        probe_results: Sequence[bool] = (True,),
        mac: str = "00:11:22:aa:bb:cc",
        exists: bool = True,
    ):
        self.link_states = list(link_states)
        self.probe_results = list(probe_results)
        self.mac = mac
        self.exists = exists
        self.probes: List[str] = []

    def read_link_state(self, device: str) -> LinkState:
        # The last scripted state repeats once the script runs out
        if len(self.link_states) > 1:
            return self.link_states.pop(0)
        return self.link_states[0]

    def read_identity(self, device: str) -> DeviceIdentity:
        if not self.exists:
            raise DeviceNotFound(device)
        return DeviceIdentity(name=device, mac_address=self.mac)

    def probe_reachable(self, host: str, attempts: int = 1) -> bool:
        self.probes.append(host)
        if len(self.probe_results) > 1:
            return self.probe_results.pop(0)
        return self.probe_results[0]

    def read_info(self, device: str) -> InterfaceInfo:
        if not self.exists:
            raise DeviceNotFound(device)
        return InterfaceInfo(name=device, mac_address=self.mac, link_state=self.link_states[0])


class FakeApplier(NetworkApplier):
    """Records every applier call as (operation, device, *args)."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.calls: List[tuple] = []

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    def bring_up(self, device: str) -> bool:
        self.calls.append(("bring_up", device))
        return self.succeed

    def bring_down(self, device: str) -> bool:
        self.calls.append(("bring_down", device))
        return self.succeed

    def apply_static(self, device: str, config: StaticConfig) -> bool:
        self.calls.append(("apply_static", device, config))
        return self.succeed

    def apply_dhcp(self, device: str) -> bool:
        self.calls.append(("apply_dhcp", device))
        return self.succeed

    def flush(self, device: str) -> bool:
        self.calls.append(("flush", device))
        return self.succeed


class RecordingNotifier(StatusNotifier):
    def __init__(self):
        self.states: List[ControllerState] = []

    def publish_state(
        self, device: str, state: ControllerState, attempt: ReconciliationAttempt
    ) -> None:
        self.states.append(state)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests"""
    logging.getLogger("netkeeper").setLevel(logging.DEBUG)


@pytest.fixture
def link_config(tmp_path) -> LinkManagerConfig:
    """Default config pointing every file at the test's temp dir"""
    return LinkManagerConfig(
        device="eth0",
        static_config_path=str(tmp_path / "network.conf"),
        record_dir=str(tmp_path / "netcfg"),
        resolv_conf=str(tmp_path / "resolv.conf"),
        sysfs_root=str(tmp_path / "sys"),
        link_settle=0,
        require_root=False,
        enable_notifications=False,
    )


@pytest.fixture
def identity() -> DeviceIdentity:
    return DeviceIdentity(name="eth0", mac_address="00:11:22:AA:BB:CC")


@pytest.fixture
def store(link_config) -> ConfigurationStore:
    return ConfigurationStore(link_config.record_dir)


@pytest.fixture
def static_config() -> StaticConfig:
    return StaticConfig(
        ip_address="10.0.0.5",
        netmask="255.255.255.0",
        gateway="10.0.0.1",
    )


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
