#!/usr/bin/env python3
"""Host-facing observer of engine events.

A SyncObserver is handed to the engine once, at construction. Subclasses
override only the events they care about; every method defaults to a
no-op. Methods are called on the event loop thread and must not block.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from lanclip.device import DeviceInfo
    from lanclip.item import ClipboardItem

logger = logging.getLogger(__name__)


class SyncObserver:
    """No-op observer."""

    def on_local_change(self, item: ClipboardItem) -> None:
        """Local clipboard content changed."""

    def on_remote_applied(self, item: ClipboardItem) -> None:
        """Content from the peer was written to the local clipboard."""

    def on_peer_info(self, info: DeviceInfo) -> None:
        """The peer announced its identity."""

    def on_connected(self, peer: str) -> None:
        """A peer connection opened."""

    def on_disconnected(self, requested: bool) -> None:
        """The peer connection ended."""

    def on_error(self, error: Exception) -> None:
        """A transport, protocol or apply error occurred."""


class StatusObserver(SyncObserver):
    """Print connection status lines to stderr for the CLI host."""

    def on_connected(self, peer: str) -> None:
        click.echo(f"Connected to {peer}", err=True)

    def on_disconnected(self, requested: bool) -> None:
        if not requested:
            click.echo("Disconnected from peer", err=True)

    def on_peer_info(self, info: DeviceInfo) -> None:
        click.echo(f"Paired with {info.device_name} ({info.device_type})", err=True)

    def on_remote_applied(self, item: ClipboardItem) -> None:
        logger.info("Synced: %s", item.content_type.value)
