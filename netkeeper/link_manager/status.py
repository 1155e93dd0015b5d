"""One-shot report of a device's network state using Rich."""

import argparse
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import LinkManagerConfig, load_config
from .errors import DeviceNotFound
from .inspector import InterfaceInspector, SystemInspector
from .models import InterfaceInfo, LinkState
from .store import ConfigurationStore


def _value(value: Optional[str]) -> Text:
    if value:
        return Text(value, style="white")
    return Text("--", style="dim")


def build_status_table(info: InterfaceInfo, record: Optional[str]) -> Table:
    """Create the table of interface settings."""
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=14)
    table.add_column("Value")

    link_up = info.link_state is LinkState.UP
    table.add_row("Link", Text("UP" if link_up else "DOWN", style="green" if link_up else "red"))
    table.add_row("MAC", _value(info.mac_address))
    table.add_row("IPv4", _value(info.ipv4_address))
    table.add_row("IPv6", _value(info.ipv6_address))
    table.add_row("Netmask", _value(info.netmask))
    table.add_row("Gateway", _value(info.gateway))
    table.add_row("DNS", _value(" ".join(info.dns_servers)))
    table.add_row("Record", _value(record))
    return table


def render_status(
    config: LinkManagerConfig,
    console: Console,
    inspector: Optional[InterfaceInspector] = None,
    store: Optional[ConfigurationStore] = None,
) -> bool:
    """Print the status panel. Returns False if the device does not exist."""
    inspector = inspector or SystemInspector(
        sysfs_root=config.sysfs_root,
        resolv_conf=config.resolv_conf,
        probe_timeout=config.probe_timeout,
    )
    store = store or ConfigurationStore(config.record_dir)

    try:
        identity = inspector.read_identity(config.device)
        info = inspector.read_info(config.device)
    except DeviceNotFound as e:
        console.print(Text(str(e), style="bold red"))
        return False

    record = None
    if store.exists(identity):
        record = str(store.path_for(identity))

    console.print(
        Panel(
            build_status_table(info, record),
            title=f"[bold]{config.device}[/bold]",
            style="cyan",
        )
    )
    return True


def run_status(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="netkeeper-status",
        description="Show the current network settings of a device.",
    )
    parser.add_argument("-d", "--device", help="Network device (default: eth0)")
    parser.add_argument("-s", "--settings", help="YAML settings file")
    args = parser.parse_args(argv)

    config = load_config(args.settings)
    if args.device:
        config.device = args.device

    return 0 if render_status(config, Console()) else 1
