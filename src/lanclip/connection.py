#!/usr/bin/env python3
"""Connection state for one peer session."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lanclip.device import DeviceInfo
    from websockets.asyncio.connection import Connection as WebSocket


class ConnectionState(Enum):
    """Lifecycle of a peer connection.

    DISCONNECTED -> CONNECTING -> HANDSHAKING -> OPEN -> CLOSING -> DISCONNECTED,
    with CLOSED as the terminal state after an explicit shutdown.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """A live session with one peer.

    Attributes:
        websocket: The underlying WebSocket connection.
        peer: Human-readable peer label for log messages.
        outbound: Encoded frames waiting to be sent, in send order.
        last_ping_sent: Timestamp (ms) of the last ping, or None.
        first_unanswered_ping: Timestamp (ms) of the oldest ping sent since
            the last pong, or None when every ping is answered.
        last_pong_received: Timestamp (ms) of the last pong arrival, or None.
        latency_ms: Round-trip time measured from the last pong, or None.
        peer_info: Identity the peer announced, once received.
        closed: Set when the session has ended.
    """

    websocket: WebSocket
    peer: str
    outbound: asyncio.Queue[str] = field(default_factory=asyncio.Queue)
    last_ping_sent: int | None = None
    first_unanswered_ping: int | None = None
    last_pong_received: int | None = None
    latency_ms: int | None = None
    peer_info: DeviceInfo | None = None
    closed: asyncio.Event = field(default_factory=asyncio.Event)

    def record_ping(self, now: int) -> None:
        """Note a ping sent at now."""
        self.last_ping_sent = now
        if self.first_unanswered_ping is None:
            self.first_unanswered_ping = now

    def record_pong(self, now: int) -> None:
        """Note a pong received at now; every earlier ping counts as answered."""
        self.last_pong_received = now
        self.first_unanswered_ping = None

    def ping_overdue(self, now: int, timeout_ms: int) -> bool:
        """Return True if a ping has been unanswered for longer than timeout_ms."""
        if self.first_unanswered_ping is None:
            return False
        return now - self.first_unanswered_ping > timeout_ms
