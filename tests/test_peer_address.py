#!/usr/bin/env python3
"""Tests for peer address and pairing payload parsing."""
import pytest

from lanclip.peer_address import (
    DEFAULT_PORT,
    PeerAddress,
    PeerAddressError,
    parse_pairing_payload,
    parse_peer_address,
)


def test_parse_full_connection_string() -> None:
    """Test scheme, host and port are extracted."""
    address = parse_peer_address("ws://192.168.1.100:8765")
    assert address == PeerAddress(scheme="ws", host="192.168.1.100", port=8765)
    assert address.uri == "ws://192.168.1.100:8765"


def test_parse_bare_host_uses_defaults() -> None:
    """Test a bare host gets the default scheme and port."""
    address = parse_peer_address("laptop.local")
    assert address.uri == f"ws://laptop.local:{DEFAULT_PORT}"


def test_ipv6_host_is_bracketed_in_uri() -> None:
    """Test IPv6 literals are bracketed when rebuilding the URI."""
    assert parse_peer_address("ws://[::1]:9000").uri == "ws://[::1]:9000"


@pytest.mark.parametrize(
    "address",
    ["", "http://host:80", "ws://:8765", "ws://host:0", "ws://host:99999", "ws://host:abc"],
)
def test_invalid_addresses_are_rejected(address: str) -> None:
    """Test bad schemes, hosts and ports raise PeerAddressError."""
    with pytest.raises(PeerAddressError):
        parse_peer_address(address)


def test_pairing_json_payload() -> None:
    """Test scanned pairing JSON becomes an address with a name."""
    address = parse_pairing_payload(
        '{"server_ip": "10.0.0.5", "server_port": 9001, "device_name": "Desk"}'
    )
    assert address.uri == "ws://10.0.0.5:9001"
    assert address.name == "Desk"


def test_pairing_json_without_port_uses_default() -> None:
    """Test the port defaults when the payload omits it."""
    assert parse_pairing_payload('{"server_ip": "10.0.0.5"}').port == DEFAULT_PORT


def test_pairing_plain_text_payload() -> None:
    """Test a non-JSON code is taken as the server address."""
    assert parse_pairing_payload("10.0.0.5:9001").uri == "ws://10.0.0.5:9001"


@pytest.mark.parametrize(
    "payload",
    ['{"server_port": 1}', '{"server_ip": ""}', '{"server_ip": "h", "server_port": "x"}'],
)
def test_invalid_pairing_payloads(payload: str) -> None:
    """Test pairing data without a usable server is rejected."""
    with pytest.raises(PeerAddressError):
        parse_pairing_payload(payload)
