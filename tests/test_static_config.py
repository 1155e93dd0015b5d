"""Tests for the static KEY=VALUE override file."""

import pytest

from netkeeper.link_manager.errors import StaticConfigError
from netkeeper.link_manager.models import StaticConfig
from netkeeper.link_manager.static_config import load_static_config, parse_static_lines


def test_missing_file_means_dhcp(tmp_path):
    assert load_static_config(tmp_path / "network.conf") is None


def test_full_static_file(tmp_path):
    path = tmp_path / "network.conf"
    path.write_text(
        "IP_ADDR=10.0.0.5\n"
        "NETMASK=255.255.255.0\n"
        "GATEWAY=10.0.0.1\n"
        "DNS1=  1.1.1.1\n"
        "DNS2=\t9.9.9.9\n"
    )

    assert load_static_config(path) == StaticConfig(
        ip_address="10.0.0.5",
        netmask="255.255.255.0",
        gateway="10.0.0.1",
        dns_servers=("1.1.1.1", "9.9.9.9"),
    )


def test_unknown_keys_and_comments_are_ignored():
    values = parse_static_lines(
        "# office network\n"
        "\n"
        "IP_ADDR=10.0.0.5\n"
        "HOSTNAME=kiosk\n"
        "garbage line\n"
    )

    assert values == {"IP_ADDR": "10.0.0.5"}


def test_dns_domain_is_optional(tmp_path):
    path = tmp_path / "network.conf"
    path.write_text("IP_ADDR=10.0.0.5\nNETMASK=24\nDNS1=10.0.0.1\nDNS_DOMAIN=lan\n")

    config = load_static_config(path)

    assert config.netmask == "24"
    assert config.gateway == ""
    assert config.dns_servers == ("10.0.0.1",)
    assert config.dns_domain == "lan"


@pytest.mark.parametrize(
    "content",
    [
        "NETMASK=255.255.255.0\n",
        "IP_ADDR=10.0.0.300\nNETMASK=255.255.255.0\n",
        "IP_ADDR=10.0.0.5\n",
        "IP_ADDR=10.0.0.5\nNETMASK=255.0.255.0\n",
        "IP_ADDR=10.0.0.5\nNETMASK=255.255.255.0\nGATEWAY=router\n",
    ],
)
def test_unusable_file_raises(tmp_path, content):
    path = tmp_path / "network.conf"
    path.write_text(content)

    with pytest.raises(StaticConfigError):
        load_static_config(path)
