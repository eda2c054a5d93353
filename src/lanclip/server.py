#!/usr/bin/env python3
"""Serve mode: accept one peer at a time on a WebSocket listener.

The server side runs the same engine as the connecting side. Each accepted
WebSocket is attached to the engine's transport; while a peer is
connected, further peers are refused with close code 1013 (try again
later). The listener runs until shutdown is requested.

Usage:
    lanclip --serve 0.0.0.0:8765
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import click
from websockets.asyncio.server import serve

from lanclip.protocol import MAX_MESSAGE_SIZE
from lanclip.transport_constants import CLOSE_TIMEOUT

if TYPE_CHECKING:
    from websockets.asyncio.server import ServerConnection

    from lanclip.engine import SyncEngine
    from lanclip.peer_address import PeerAddress

logger = logging.getLogger(__name__)

# Close code sent to peers arriving while another peer is connected.
TRY_AGAIN_LATER: int = 1013


async def handle_peer(engine: SyncEngine, websocket: ServerConnection) -> None:
    """Run one accepted peer connection until it ends.

    Args:
        engine: The running engine.
        websocket: The accepted connection.
    """
    peer = "{}:{}".format(*websocket.remote_address[:2])
    try:
        connection = await engine.transport.attach(websocket, peer)
    except ConnectionError as e:
        logger.warning("Refusing peer %s: %s", peer, e)
        await websocket.close(TRY_AGAIN_LATER, "busy")
        return
    await connection.closed.wait()
    logger.debug("Peer %s handler finished", peer)


def print_startup_message(address: PeerAddress) -> None:
    """Print the address peers should connect to."""
    click.echo(f"Listening on {address.uri}", err=True)


async def run_server(
    engine: SyncEngine,
    address: PeerAddress,
    shutdown_requested: asyncio.Event,
) -> None:
    """Start the engine and serve peers until shutdown is requested.

    Args:
        engine: Engine to run; it is stopped on return.
        address: Host and port to listen on.
        shutdown_requested: Event set by the signal handlers.
    """
    async with serve(
        lambda websocket: handle_peer(engine, websocket),
        address.host,
        address.port,
        ping_interval=None,
        max_size=MAX_MESSAGE_SIZE,
        close_timeout=CLOSE_TIMEOUT,
    ):
        print_startup_message(address)
        await engine.start()
        try:
            await shutdown_requested.wait()
        finally:
            await engine.stop()
