"""Tests for the sysfs/iproute2 interface inspector."""

import subprocess
from types import SimpleNamespace

import pytest

from netkeeper.link_manager.errors import DeviceNotFound
from netkeeper.link_manager.inspector import SystemInspector
from netkeeper.link_manager.models import LinkState

IP_LINK = (
    "2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP "
    "mode DEFAULT group default qlen 1000\\    link/ether 52:54:00:AB:cd:01 "
    "brd ff:ff:ff:ff:ff:ff\n"
)
IP_ADDR4 = (
    "2: eth0    inet 192.168.143.20/24 brd 192.168.143.255 scope global eth0\\"
    "       valid_lft forever preferred_lft forever\n"
)
IP_ADDR6 = (
    "2: eth0    inet6 fe80::a6ba:dbff:fe02:38e1/64 scope link \\"
    "       valid_lft forever preferred_lft forever\n"
)
IP_ROUTE = (
    "default via 192.168.143.254 proto static\n"
    "192.168.143.0/24 proto kernel scope link src 192.168.143.20\n"
)


def fake_ip(args, **kwargs):
    if args[:2] == ["ip", "-o"] and "link" in args:
        return SimpleNamespace(returncode=0, stdout=IP_LINK, stderr="")
    if "-4" in args:
        return SimpleNamespace(returncode=0, stdout=IP_ADDR4, stderr="")
    if "-6" in args:
        return SimpleNamespace(returncode=0, stdout=IP_ADDR6, stderr="")
    if args[:2] == ["ip", "route"]:
        return SimpleNamespace(returncode=0, stdout=IP_ROUTE, stderr="")
    raise AssertionError(f"unexpected command {args}")


@pytest.fixture
def sysfs(tmp_path):
    device_dir = tmp_path / "sys" / "eth0"
    device_dir.mkdir(parents=True)
    return device_dir


@pytest.fixture
def inspector(tmp_path):
    return SystemInspector(
        sysfs_root=str(tmp_path / "sys"),
        resolv_conf=str(tmp_path / "resolv.conf"),
    )


@pytest.mark.parametrize("content,expected", [("1\n", LinkState.UP), ("0\n", LinkState.DOWN)])
def test_read_link_state(inspector, sysfs, content, expected):
    (sysfs / "carrier").write_text(content)

    assert inspector.read_link_state("eth0") is expected


def test_missing_carrier_file_reads_as_down(inspector):
    assert inspector.read_link_state("eth9") is LinkState.DOWN


def test_read_identity(inspector, monkeypatch):
    monkeypatch.setattr(subprocess, "run", fake_ip)

    identity = inspector.read_identity("eth0")

    assert identity.name == "eth0"
    assert identity.mac_address == "525400abcd01"


def test_read_identity_unknown_device(inspector, monkeypatch):
    def no_device(args, **kwargs):
        return SimpleNamespace(returncode=1, stdout="", stderr='Device "eth9" does not exist.')

    monkeypatch.setattr(subprocess, "run", no_device)

    with pytest.raises(DeviceNotFound):
        inspector.read_identity("eth9")


def test_read_info(inspector, sysfs, tmp_path, monkeypatch):
    monkeypatch.setattr(subprocess, "run", fake_ip)
    (sysfs / "carrier").write_text("1\n")
    (tmp_path / "resolv.conf").write_text(
        "# generated\nnameserver 1.2.3.4\nnameserver 253.1.2.3\nnameserver 9.9.9.9\n"
    )

    info = inspector.read_info("eth0")

    assert info.link_state is LinkState.UP
    assert info.mac_address == "525400abcd01"
    assert info.ipv4_address == "192.168.143.20"
    assert info.netmask == "255.255.255.0"
    assert info.ipv6_address == "fe80::a6ba:dbff:fe02:38e1"
    assert info.gateway == "192.168.143.254"
    assert info.dns_servers == ["1.2.3.4", "253.1.2.3"]


def test_read_info_unconfigured_device(inspector, monkeypatch):
    def bare(args, **kwargs):
        if "link" in args:
            return fake_ip(args)
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(subprocess, "run", bare)

    info = inspector.read_info("eth0")

    assert info.ipv4_address is None
    assert info.netmask is None
    assert info.gateway is None
    assert info.dns_servers == []
    assert info.link_state is LinkState.DOWN


def test_probe_reachable_uses_single_ping(inspector, monkeypatch):
    commands = []

    def ping(args, **kwargs):
        commands.append(list(args))
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr(subprocess, "run", ping)

    assert inspector.probe_reachable("8.8.8.8")
    assert commands == [["ping", "-c", "1", "-W", "2", "8.8.8.8"]]


@pytest.mark.parametrize(
    "outcome",
    [
        SimpleNamespace(returncode=1),
        subprocess.TimeoutExpired(cmd="ping", timeout=3),
        FileNotFoundError("ping"),
    ],
)
def test_probe_failures_are_unreachable(inspector, monkeypatch, outcome):
    def ping(args, **kwargs):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(subprocess, "run", ping)

    check = inspector.probe("8.8.8.8")

    assert not check.success
    assert check.error
    assert not inspector.probe_reachable("8.8.8.8")


def test_device_without_hardware_address_is_not_managed(inspector, monkeypatch):
    def tunnel(args, **kwargs):
        return SimpleNamespace(
            returncode=0,
            stdout="5: wg0: <POINTOPOINT,NOARP,UP,LOWER_UP> mtu 1420 qdisc noqueue "
            "state UNKNOWN mode DEFAULT group default qlen 1000\\    link/none \n",
            stderr="",
        )

    monkeypatch.setattr(subprocess, "run", tunnel)

    with pytest.raises(DeviceNotFound):
        inspector.read_identity("wg0")
