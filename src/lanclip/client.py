#!/usr/bin/env python3
"""Connect mode implementation for lanclip.

This module provides the main entry point for connect mode, which connects
to a paired peer over WebSocket, monitors the local clipboard and sends
changes to the peer, while applying clipboard updates received from it.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lanclip.engine import SyncEngine
    from lanclip.peer_address import PeerAddress


def install_signal_handlers() -> asyncio.Event:
    """Return an event set on SIGINT or SIGTERM."""
    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)
    return shutdown_requested


async def run_client(
    engine: SyncEngine,
    address: PeerAddress,
    shutdown_requested: asyncio.Event,
) -> bool:
    """Connect to a peer and sync until shutdown is requested.

    Returns immediately if the initial connection fails. A peer lost later
    is only reconnected when the engine is configured to reconnect.

    Args:
        engine: Engine to run; it is stopped on return.
        address: The peer to connect to.
        shutdown_requested: Event set by the signal handlers.

    Returns:
        True if the initial connection succeeded.
    """
    try:
        connected = await engine.start(address)
        if connected:
            await shutdown_requested.wait()
    finally:
        await engine.stop()
    return connected
