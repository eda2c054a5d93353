#!/usr/bin/env python3
"""WebSocket transport for clipboard synchronization.

SyncTransport owns at most one Connection to a peer. It performs the
device_info handshake, runs the reader, writer and keepalive tasks, and
dispatches inbound envelopes to a TransportListener.

Delivery is at-most-once: send() drops updates while the connection is not
open instead of buffering them. Every setup, send and parse error is logged
and reported through TransportListener.on_error; none of them propagate.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol

from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from lanclip.connection import Connection, ConnectionState
from lanclip.item import now_ms
from lanclip.peer_address import PeerAddress, parse_peer_address
from lanclip.protocol import (
    CLIPBOARD_UPDATE,
    DEVICE_INFO,
    MAX_MESSAGE_SIZE,
    PING,
    PONG,
    ProtocolError,
    decode_clipboard_update,
    decode_device_info,
    decode_envelope,
    decode_timestamp,
    encode_clipboard_update,
    encode_device_info,
    encode_ping,
    encode_pong,
)
from lanclip.transport_constants import CLOSE_TIMEOUT, OPEN_TIMEOUT, PING_INTERVAL

if TYPE_CHECKING:
    from websockets.asyncio.connection import Connection as WebSocket

    from lanclip.device import DeviceInfo
    from lanclip.item import ClipboardItem

logger = logging.getLogger(__name__)

Connector = Callable[..., Awaitable["WebSocket"]]


class TransportListener(Protocol):
    """Receiver of transport events."""

    def on_connected(self, peer: str) -> None: ...

    def on_disconnected(self, requested: bool) -> None: ...

    def on_item(self, item: ClipboardItem) -> None: ...

    def on_device_info(self, info: DeviceInfo) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class SyncTransport:
    """Single-peer WebSocket transport.

    Only the transport mutates its Connection and state. All methods must
    be called from the event loop thread.

    Args:
        device: Identity announced to the peer.
        listener: Receiver of transport events.
        connector: Coroutine function opening a client WebSocket.
        ping_interval: Seconds between keepalive pings.
        pong_timeout: Seconds a ping may stay unanswered before the
            connection is dropped, or None to never drop it.
    """

    def __init__(
        self,
        device: DeviceInfo,
        listener: TransportListener,
        connector: Connector = websocket_connect,
        ping_interval: float = PING_INTERVAL,
        pong_timeout: float | None = None,
        open_timeout: float = OPEN_TIMEOUT,
    ) -> None:
        self.device = device
        self._listener = listener
        self._connector = connector
        self.ping_interval = ping_interval
        self.pong_timeout = pong_timeout
        self.open_timeout = open_timeout
        self._state = ConnectionState.DISCONNECTED
        self._connection: Connection | None = None
        self._tasks: list[asyncio.Task[None]] = []
        self._handlers: dict[str, Callable[[Connection, dict[str, Any]], None]] = {
            CLIPBOARD_UPDATE: self._handle_clipboard_update,
            DEVICE_INFO: self._handle_device_info,
            PONG: self._handle_pong,
            PING: self._handle_ping,
        }

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connection(self) -> Connection | None:
        return self._connection

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def latency_ms(self) -> int | None:
        """Round-trip time from the last pong, or None."""
        return self._connection.latency_ms if self._connection else None

    async def connect(self, address: PeerAddress | str) -> bool:
        """Connect to a peer, reporting failures through on_error.

        Args:
            address: PeerAddress or "scheme://host:port" string.

        Returns:
            True if the connection is open.

        Raises:
            PeerAddressError: If the address is invalid. State is unchanged.
        """
        if isinstance(address, str):
            address = parse_peer_address(address)
        if self._state is ConnectionState.OPEN:
            logger.warning("Already connected")
            return True
        try:
            await self.open(address)
        except ConnectionError as e:
            logger.error("Error connecting to %s: %s", address, e)
            self.report_error(e)
            return False
        return True

    async def open(self, address: PeerAddress) -> None:
        """Connect to a peer, raising on failure.

        Args:
            address: The peer to connect to.

        Raises:
            ConnectionError: If the transport is shut down, busy, or the
                WebSocket or handshake fails.
        """
        if self._state is ConnectionState.OPEN:
            return
        if self._state is ConnectionState.CLOSED:
            raise ConnectionError("Transport is shut down")
        if self._state is not ConnectionState.DISCONNECTED:
            raise ConnectionError(f"Connection already {self._state.value}")

        self._state = ConnectionState.CONNECTING
        logger.info("Connecting to %s", address.uri)
        try:
            websocket = await self._connector(
                address.uri,
                ping_interval=None,
                max_size=MAX_MESSAGE_SIZE,
                open_timeout=self.open_timeout,
                close_timeout=CLOSE_TIMEOUT,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectionError(f"Failed to connect to {address.uri}: {e}") from e
        except asyncio.CancelledError:
            self._state = ConnectionState.DISCONNECTED
            raise
        await self._start_session(websocket, address.name or address.uri)

    async def attach(self, websocket: WebSocket, peer: str) -> Connection:
        """Adopt an accepted WebSocket as the peer connection.

        Args:
            websocket: Server-side WebSocket accepted from a peer.
            peer: Peer label for log messages.

        Returns:
            The new Connection; its closed event is set when it ends.

        Raises:
            ConnectionError: If a connection already exists or the
                transport is shut down.
        """
        if self._state is ConnectionState.CLOSED:
            raise ConnectionError("Transport is shut down")
        if self._state is not ConnectionState.DISCONNECTED:
            raise ConnectionError(f"Connection already {self._state.value}")
        return await self._start_session(websocket, peer)

    async def disconnect(self) -> None:
        """Close the connection if there is one. Idempotent."""
        connection = self._connection
        if connection is None:
            return
        await self._close_connection(connection, requested=True)

    async def shutdown(self) -> None:
        """Disconnect and enter the terminal CLOSED state."""
        await self.disconnect()
        self._state = ConnectionState.CLOSED

    def send(self, item: ClipboardItem) -> bool:
        """Queue a clipboard update for the peer.

        Args:
            item: The item to send.

        Returns:
            True if the update was queued, False if it was dropped.
        """
        connection = self._connection
        if self._state is not ConnectionState.OPEN or connection is None:
            logger.warning("Not connected, cannot send clipboard update")
            return False
        try:
            frame = encode_clipboard_update(item, self.device.device_id, now_ms())
        except (TypeError, ValueError) as e:
            logger.error("Error encoding clipboard update: %s", e)
            self.report_error(e)
            return False
        connection.outbound.put_nowait(frame)
        logger.debug("Queued clipboard update: %s", item.content_type.value)
        return True

    async def _start_session(self, websocket: WebSocket, peer: str) -> Connection:
        """Send device_info and start the connection tasks."""
        self._state = ConnectionState.HANDSHAKING
        try:
            await websocket.send(encode_device_info(self.device, now_ms()))
        except (OSError, WebSocketException) as e:
            self._state = ConnectionState.DISCONNECTED
            with suppress(OSError, WebSocketException):
                await websocket.close()
            raise ConnectionError(f"Handshake with {peer} failed: {e}") from e
        except asyncio.CancelledError:
            self._state = ConnectionState.DISCONNECTED
            with suppress(OSError, WebSocketException):
                await websocket.close()
            raise
        logger.debug("Sent device info")

        connection = Connection(websocket=websocket, peer=peer)
        self._connection = connection
        self._tasks = [
            asyncio.create_task(self._read_loop(connection)),
            asyncio.create_task(self._write_loop(connection)),
            asyncio.create_task(self._keepalive_loop(connection)),
        ]
        self._state = ConnectionState.OPEN
        logger.info("Connected to %s", peer)
        self._listener.on_connected(peer)
        return connection

    async def _close_connection(self, connection: Connection, requested: bool) -> None:
        """Tear down a connection once, from whichever task notices first."""
        if self._connection is not connection:
            return
        self._connection = None
        self._state = ConnectionState.CLOSING

        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        self._tasks = []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task

        try:
            await connection.websocket.close()
        except (OSError, WebSocketException) as e:
            logger.debug("Error closing connection to %s: %s", connection.peer, e)

        if self._state is ConnectionState.CLOSING:
            self._state = ConnectionState.DISCONNECTED
        connection.closed.set()
        logger.info("Disconnected from %s", connection.peer)
        self._listener.on_disconnected(requested)

    async def _read_loop(self, connection: Connection) -> None:
        """Dispatch inbound frames in arrival order until the peer goes away."""
        try:
            async for message in connection.websocket:
                self._dispatch(connection, message)
        except ConnectionClosed as e:
            logger.warning("Connection to %s closed: %s", connection.peer, e)
        except (OSError, WebSocketException) as e:
            logger.error("Error reading from %s: %s", connection.peer, e)
            self.report_error(e)
        await self._close_connection(connection, requested=False)

    async def _write_loop(self, connection: Connection) -> None:
        """Send queued frames in order, one frame per message."""
        while True:
            frame = await connection.outbound.get()
            try:
                await connection.websocket.send(frame)
            except ConnectionClosed as e:
                logger.warning("Connection to %s closed while sending: %s", connection.peer, e)
                await self._close_connection(connection, requested=False)
                return
            except (OSError, WebSocketException) as e:
                logger.error("Error sending to %s: %s", connection.peer, e)
                self.report_error(e)

    async def _keepalive_loop(self, connection: Connection) -> None:
        """Ping the peer every ping_interval while the connection is open.

        With a pong_timeout the loop also wakes often enough to notice an
        overdue ping within that timeout.
        """
        loop = asyncio.get_running_loop()
        tick = self.ping_interval
        if self.pong_timeout is not None:
            tick = min(tick, self.pong_timeout)
        last_ping = loop.time()
        while True:
            await asyncio.sleep(tick)
            now = now_ms()
            if self.pong_timeout is not None and connection.ping_overdue(
                now, int(self.pong_timeout * 1000)
            ):
                logger.warning("No pong from %s within %.1f s", connection.peer, self.pong_timeout)
                await self._close_connection(connection, requested=False)
                return
            # Sleeps can end slightly early; a ping is due within half a tick.
            if loop.time() - last_ping < self.ping_interval - tick / 2:
                continue
            last_ping = loop.time()
            connection.record_ping(now)
            connection.outbound.put_nowait(encode_ping(self.device.device_id, now))
            logger.debug("Sent ping")

    def _dispatch(self, connection: Connection, message: str | bytes) -> None:
        """Route one inbound frame to its handler by envelope type."""
        if not isinstance(message, str):
            logger.warning("Discarding binary frame of %d bytes", len(message))
            return
        logger.debug("Received message: %.200s", message)
        try:
            envelope = decode_envelope(message)
            handler = self._handlers.get(envelope["type"])
            if handler is None:
                logger.warning("Unknown message type: %s", envelope["type"])
                return
            handler(connection, envelope)
        except ProtocolError as e:
            logger.error("Error handling message: %s", e)
            self.report_error(e)

    def _handle_clipboard_update(self, connection: Connection, envelope: dict[str, Any]) -> None:
        item = decode_clipboard_update(envelope, now_ms())
        logger.debug("Received clipboard update from %s: %s", item.source_device, item.content_type.value)
        self._listener.on_item(item)

    def _handle_device_info(self, connection: Connection, envelope: dict[str, Any]) -> None:
        info = decode_device_info(envelope)
        connection.peer_info = info
        logger.info("Peer is %s (%s)", info.device_name, info.device_type)
        self._listener.on_device_info(info)

    def _handle_pong(self, connection: Connection, envelope: dict[str, Any]) -> None:
        sent_at = decode_timestamp(envelope)
        now = now_ms()
        connection.record_pong(now)
        connection.latency_ms = max(0, now - sent_at)
        logger.debug("Received pong, latency: %dms", connection.latency_ms)

    def _handle_ping(self, connection: Connection, envelope: dict[str, Any]) -> None:
        connection.outbound.put_nowait(encode_pong(decode_timestamp(envelope)))

    def report_error(self, error: Exception) -> None:
        """Hand an error to the listener's on_error."""
        self._listener.on_error(error)
