#!/usr/bin/env python3
"""Peer address and pairing payload parsing.

A peer address is handed to the transport as a connection string of the
form scheme://host:port. Pairing produces one out of band, usually from a
scanned code holding {"server_ip", "server_port", "device_name"}; a code
that is not JSON is taken as a bare host or host:port.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from urllib.parse import urlsplit

DEFAULT_SCHEME: str = "ws"
DEFAULT_PORT: int = 8765
SCHEMES: tuple[str, ...] = ("ws", "wss")


class PeerAddressError(ValueError):
    """Invalid peer address or pairing payload."""


@dataclass(frozen=True)
class PeerAddress:
    """Validated peer location.

    Attributes:
        scheme: "ws" or "wss".
        host: Host name or IP address.
        port: TCP port, 1-65535.
        name: Display name from pairing, if known.
    """

    scheme: str
    host: str
    port: int
    name: str | None = None

    @property
    def uri(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.uri


def _validate_port(port: object) -> int:
    """Return port as an int in range, else raise PeerAddressError."""
    try:
        value = int(port)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise PeerAddressError(f"Invalid port: {port!r}") from e
    if not 0 < value < 65536:
        raise PeerAddressError(f"Port out of range: {value}")
    return value


def parse_peer_address(address: str, name: str | None = None) -> PeerAddress:
    """Parse a connection string.

    Args:
        address: "scheme://host:port", or "host[:port]" for the default scheme.
        name: Optional display name to attach.

    Returns:
        The validated address.

    Raises:
        PeerAddressError: On unsupported scheme, missing host or bad port.
    """
    address = address.strip()
    if not address:
        raise PeerAddressError("Empty peer address")
    if "://" not in address:
        address = f"{DEFAULT_SCHEME}://{address}"
    parts = urlsplit(address)
    if parts.scheme not in SCHEMES:
        raise PeerAddressError(f"Unsupported scheme: {parts.scheme!r}")
    try:
        port = parts.port
    except ValueError as e:
        raise PeerAddressError(f"Invalid port in {address!r}") from e
    if not parts.hostname:
        raise PeerAddressError(f"Missing host in {address!r}")
    return PeerAddress(
        scheme=parts.scheme,
        host=parts.hostname,
        port=_validate_port(port if port is not None else DEFAULT_PORT),
        name=name,
    )


def parse_pairing_payload(payload: str) -> PeerAddress:
    """Turn a scanned pairing code into a peer address.

    Args:
        payload: JSON with server_ip and optional server_port/device_name,
            or a bare host[:port] string.

    Returns:
        The validated address.

    Raises:
        PeerAddressError: If the payload names no usable server.
    """
    try:
        data = json.loads(payload)
    except ValueError:
        return parse_peer_address(payload)
    if not isinstance(data, dict):
        return parse_peer_address(payload)

    server_ip = data.get("server_ip")
    if not isinstance(server_ip, str) or not server_ip:
        raise PeerAddressError("Pairing data has no server_ip")
    name = data.get("device_name")
    return PeerAddress(
        scheme=DEFAULT_SCHEME,
        host=server_ip,
        port=_validate_port(data.get("server_port", DEFAULT_PORT)),
        name=name if isinstance(name, str) else None,
    )
