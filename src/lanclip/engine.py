#!/usr/bin/env python3
"""Clipboard synchronization engine.

SyncEngine builds the detector, transport and coordinator once per run and
owns all shared state explicitly; nothing is kept in module globals.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lanclip.coordinator import SyncCoordinator
from lanclip.detector import ERROR_INTERVAL, POLL_INTERVAL, ChangeDetector
from lanclip.device import create_local_device
from lanclip.observer import SyncObserver
from lanclip.peer_address import PeerAddress, parse_peer_address
from lanclip.transport import SyncTransport
from lanclip.transport_constants import MAX_ATTEMPTS, PING_INTERVAL
from lanclip.transport_retry import connect_with_retry

if TYPE_CHECKING:
    from lanclip.clipboard import ClipboardBackend
    from lanclip.device import DeviceInfo
    from lanclip.transport import Connector

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    """Engine settings.

    Attributes:
        device_name: Name announced to the peer; host name if None.
        poll_interval: Seconds between clipboard reads.
        error_interval: Seconds to wait after a failed clipboard read.
        ping_interval: Seconds between keepalive pings.
        pong_timeout: Seconds before an unanswered ping drops the
            connection, or None to never drop it.
        reconnect: Reconnect with exponential backoff after losing the peer.
        reconnect_attempts: Connection attempts per reconnect.
    """

    device_name: str | None = None
    poll_interval: float = POLL_INTERVAL
    error_interval: float = ERROR_INTERVAL
    ping_interval: float = PING_INTERVAL
    pong_timeout: float | None = None
    reconnect: bool = False
    reconnect_attempts: int = MAX_ATTEMPTS


class _ReconnectingCoordinator(SyncCoordinator):
    """Coordinator that tells the engine when the peer is lost."""

    def __init__(self, engine: SyncEngine, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._engine = engine

    def on_disconnected(self, requested: bool) -> None:
        super().on_disconnected(requested)
        if not requested:
            self._engine.peer_lost()


class SyncEngine:
    """One clipboard sync session: detector, transport and coordinator.

    Args:
        clipboard: Local clipboard primitive.
        config: Engine settings.
        observer: Receiver of host-level events.
        connector: WebSocket client factory, replaceable for tests.
        device: Local identity; a fresh one is created if None.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        config: EngineConfig | None = None,
        observer: SyncObserver | None = None,
        connector: Connector | None = None,
        device: DeviceInfo | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.device = device or create_local_device(self.config.device_name)
        self.coordinator = _ReconnectingCoordinator(self, clipboard, self.device, observer)
        self.detector = ChangeDetector(
            clipboard,
            self.coordinator,
            interval=self.config.poll_interval,
            error_interval=self.config.error_interval,
        )
        transport_options = {} if connector is None else {"connector": connector}
        self.transport = SyncTransport(
            self.device,
            self.coordinator,
            ping_interval=self.config.ping_interval,
            pong_timeout=self.config.pong_timeout,
            **transport_options,
        )
        self.coordinator.bind(self.detector, self.transport)
        self._address: PeerAddress | None = None
        self._reconnect_task: asyncio.Task[bool] | None = None
        self._stopping = False

    async def start(self, address: PeerAddress | str | None = None) -> bool:
        """Start clipboard monitoring and, if given, connect to a peer.

        Args:
            address: Peer to connect to, or None to only monitor (serve mode).

        Returns:
            True if monitoring started and any requested connection opened.

        Raises:
            PeerAddressError: If the address is invalid.
        """
        if isinstance(address, str):
            address = parse_peer_address(address)
        self._stopping = False
        connected = True
        if address is not None:
            self._address = address
            if self.config.reconnect:
                connected = await connect_with_retry(
                    self.transport, address, self.config.reconnect_attempts
                )
            else:
                connected = await self.transport.connect(address)
        self.detector.start()
        return connected

    async def stop(self) -> None:
        """Cancel monitoring and reconnects and close the connection."""
        self._stopping = True
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None
        await self.detector.stop()
        await self.transport.shutdown()
        logger.info("Sync stopped")

    def peer_lost(self) -> None:
        """Schedule a reconnect if enabled and the engine is still running."""
        if self._stopping or not self.config.reconnect or self._address is None:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        logger.info("Reconnecting to %s", self._address)
        self._reconnect_task = asyncio.create_task(
            connect_with_retry(self.transport, self._address, self.config.reconnect_attempts)
        )
