"""Link manager service - wires the components and owns process outcomes."""

import argparse
import logging
import os
from typing import Generator, List, Optional

from netkeeper.shared.logging import clamp_debug_level, setup_debug_logging

from .applier import CommandApplier, NetworkApplier
from .config import LinkManagerConfig, load_config
from .controller import ReconciliationController
from .errors import DeviceNotFound, ReconfigurationExhausted, StaticConfigError
from .events import LinkEvent, LinkEventSource
from .inspector import InterfaceInspector, SystemInspector
from .models import DhcpConfig, NetworkConfig, StaticConfig
from .notifier import MQTTStatusNotifier
from .static_config import load_static_config
from .store import ConfigurationStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netkeeper",
        description="Keep a network interface configured and connected.",
    )
    parser.add_argument("-d", "--device", help="Network device to manage (default: eth0)")
    parser.add_argument(
        "-c", "--config", dest="static_config",
        help="Static KEY=VALUE configuration file; DHCP is used when absent",
    )
    parser.add_argument("-D", "--debug", type=int, help="Debug level 0-3")
    parser.add_argument("-s", "--settings", help="YAML settings file")
    return parser


def config_from_args(args: argparse.Namespace) -> LinkManagerConfig:
    """Load settings and apply command line overrides."""
    config = load_config(args.settings)
    if args.device:
        config.device = args.device
    if args.static_config:
        config.static_config_path = args.static_config
    if args.debug is not None:
        config.debug_level = args.debug
    return config


def resolve_network_config(config: LinkManagerConfig) -> NetworkConfig:
    """Pick the configuration for this run.

    A usable static file selects static addressing; anything else means DHCP.
    A persisted record never selects the configuration, it is only reconciled
    against the choice made here.
    """
    try:
        static = load_static_config(config.static_config_path)
    except StaticConfigError as e:
        logger.error(f"Ignoring static configuration {config.static_config_path}: {e}")
        static = None

    if static is not None:
        logger.info(f"Configuration file '{config.static_config_path}' found, using static configuration")
        return static

    if not os.path.exists(config.static_config_path):
        logger.info(f"Configuration file '{config.static_config_path}' not found")
    logger.info(f"Using {config.dhcp_client} for {config.device}")
    return DhcpConfig()


class LinkManagerService:
    """Service that keeps one device converged until told to stop."""

    def __init__(
        self,
        config: LinkManagerConfig,
        inspector: Optional[InterfaceInspector] = None,
        applier: Optional[NetworkApplier] = None,
        store: Optional[ConfigurationStore] = None,
        event_source: Optional[LinkEventSource] = None,
        notifier: Optional[MQTTStatusNotifier] = None,
    ):
        self.config = config
        self.inspector = inspector or SystemInspector(
            sysfs_root=config.sysfs_root,
            resolv_conf=config.resolv_conf,
            probe_timeout=config.probe_timeout,
        )
        self.applier = applier or CommandApplier(
            dhcp_client=config.dhcp_client,
            resolv_conf=config.resolv_conf,
        )
        self.store = store or ConfigurationStore(config.record_dir)
        self.event_source = event_source or LinkEventSource(
            config.device, sysfs_root=config.sysfs_root
        )
        if notifier is None and config.enable_notifications:
            notifier = MQTTStatusNotifier(config.mqtt, config.mqtt_topic)
        self.notifier = notifier

    def _check_privileges(self) -> bool:
        if self.config.require_root and os.geteuid() != 0:
            logger.error("This program requires root privileges. Run it with sudo.")
            return False
        return True

    def _describe(self, network_config: NetworkConfig) -> str:
        if isinstance(network_config, StaticConfig):
            return f"static {network_config.ip_address}/{network_config.netmask}"
        return "dhcp"

    def run(self) -> int:
        """Run until the event source ends. Returns the process exit code."""
        logger.info(
            f"Device: {self.config.device}, configuration file: "
            f"{self.config.static_config_path}, debug level: {self.config.debug_level}"
        )
        if not self._check_privileges():
            return EXIT_FAILURE

        try:
            identity = self.inspector.read_identity(self.config.device)
            network_config = resolve_network_config(self.config)
            events: Generator[LinkEvent, None, None] = self.event_source.subscribe()
        except DeviceNotFound as e:
            logger.error(f"{e}. Cannot continue.")
            return EXIT_FAILURE

        logger.info(f"Managing {identity.name} ({identity.mac_address}) with {self._describe(network_config)}")

        if self.notifier:
            self.notifier.connect()

        controller = ReconciliationController(
            self.config,
            identity,
            network_config,
            self.inspector,
            self.applier,
            self.store,
            notifier=self.notifier,
        )

        try:
            controller.run(events)
        except ReconfigurationExhausted as e:
            logger.error(f"{e}. Exiting.")
            return EXIT_FAILURE
        except DeviceNotFound as e:
            logger.error(f"{e}. Exiting.")
            return EXIT_FAILURE
        except KeyboardInterrupt:
            logger.info("Shutting down link manager...")
        finally:
            events.close()
            if self.notifier:
                self.notifier.close()

        return EXIT_OK


def run(argv: Optional[List[str]] = None) -> int:
    """Command line entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    requested = config.debug_level
    config.debug_level, clamped = clamp_debug_level(requested)
    setup_debug_logging(config.debug_level)
    if clamped:
        logger.warning(
            f"Invalid debug level {requested}, using {config.debug_level}"
        )

    return LinkManagerService(config).run()
