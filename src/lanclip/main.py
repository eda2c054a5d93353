"""CLI handling for lanclip.

This module provides the command-line interface for lanclip, handling
argument parsing via click, logging configuration, and dispatching to
connect or serve mode based on user-specified options.

Usage:
    lanclip --connect ws://HOST:PORT [--name NAME] [--reconnect] [--verbose]
    lanclip --pairing '{"server_ip": "HOST", "server_port": PORT}' [...]
    lanclip --serve HOST:PORT [--name NAME] [--verbose]
"""

import click
import sys

from lanclip.main_options import ModeOption
from lanclip.main_logging import configure_logging
from lanclip.detector import POLL_INTERVAL
from lanclip.engine import EngineConfig
from lanclip.peer_address import (
    PeerAddress,
    PeerAddressError,
    parse_pairing_payload,
    parse_peer_address,
)

MODES = ("connect", "pairing", "serve")


@click.command()
@click.option(
    "--connect",
    metavar="URI",
    cls=ModeOption,
    modes=MODES,
    help="Connect to a peer at ws://HOST:PORT",
)
@click.option(
    "--pairing",
    metavar="DATA",
    cls=ModeOption,
    modes=MODES,
    help="Connect using scanned pairing data (JSON or HOST[:PORT])",
)
@click.option(
    "--serve",
    metavar="HOST:PORT",
    cls=ModeOption,
    modes=MODES,
    help="Accept a peer on HOST:PORT",
)
@click.option(
    "--name",
    help="Device name announced to the peer (default: host name)",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0.01),
    default=POLL_INTERVAL,
    show_default=True,
    help="Clipboard polling interval in seconds",
)
@click.option(
    "--reconnect",
    is_flag=True,
    help="Reconnect with exponential backoff when the peer is lost",
)
@click.option(
    "--pong-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Drop the connection when no pong arrives this many seconds after a ping",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    connect: str | None,
    pairing: str | None,
    serve: str | None,
    name: str | None,
    interval: float,
    reconnect: bool,
    pong_timeout: float | None,
    verbose: bool,
) -> None:
    """Synchronize the clipboard with a paired device over the local network."""
    configure_logging(verbose)

    config = EngineConfig(
        device_name=name,
        poll_interval=interval,
        pong_timeout=pong_timeout,
        reconnect=reconnect,
    )
    try:
        address = _resolve_address(connect, pairing, serve)
    except PeerAddressError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _run_mode(serve is not None, address, config)


def _resolve_address(connect: str | None, pairing: str | None, serve: str | None) -> PeerAddress:
    """Parse whichever address option was given.

    Raises:
        PeerAddressError: If the address is invalid.
    """
    if pairing is not None:
        return parse_pairing_payload(pairing)
    return parse_peer_address(serve if serve is not None else connect)


def _run_mode(serve: bool, address: PeerAddress, config: EngineConfig) -> None:
    """Run the appropriate mode (serve or connect).

    Args:
        serve: True for serve mode, False for connect mode.
        address: Listen address in serve mode, peer address otherwise.
        config: Engine settings.
    """
    import asyncio

    try:
        connected = asyncio.run(_run(serve, address, config))
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not connected:
        click.echo(f"Error: Could not connect to {address.uri}", err=True)
        sys.exit(1)


async def _run(serve: bool, address: PeerAddress, config: EngineConfig) -> bool:
    """Build the engine and run it until SIGINT/SIGTERM.

    Returns:
        False if connect mode could not reach the peer, True otherwise.
    """
    from lanclip.client import install_signal_handlers, run_client
    from lanclip.clipboard import PyperclipClipboard
    from lanclip.engine import SyncEngine
    from lanclip.observer import StatusObserver
    from lanclip.server import run_server

    shutdown_requested = install_signal_handlers()
    engine = SyncEngine(PyperclipClipboard(), config, StatusObserver())
    if serve:
        await run_server(engine, address, shutdown_requested)
        return True
    return await run_client(engine, address, shutdown_requested)
