#!/usr/bin/env python3
"""Synchronization coordinator.

The coordinator is the only component that touches both directions of the
sync: it forwards local changes from the detector to the transport, and
applies items from the transport to the local clipboard.

Anti-echo: apply() writes the clipboard and moves the detector's last-seen
fingerprint to the written content in the same synchronous step, so the
next poll tick does not report the applied content as a local change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pyperclip

from lanclip.observer import SyncObserver

if TYPE_CHECKING:
    from lanclip.clipboard import ClipboardBackend
    from lanclip.detector import ChangeDetector
    from lanclip.device import DeviceInfo
    from lanclip.item import ClipboardItem
    from lanclip.transport import SyncTransport

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Wire detector output to the transport and transport input to the clipboard.

    Implements both ChangeListener and TransportListener. The detector and
    transport are attached after construction with bind(), since each of
    them needs the coordinator as its listener.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        device: DeviceInfo,
        observer: SyncObserver | None = None,
    ) -> None:
        self._clipboard = clipboard
        self._device = device
        self._observer = observer or SyncObserver()
        self._detector: ChangeDetector | None = None
        self._transport: SyncTransport | None = None

    def bind(self, detector: ChangeDetector, transport: SyncTransport) -> None:
        self._detector = detector
        self._transport = transport

    @property
    def detector(self) -> ChangeDetector | None:
        return self._detector

    # Detector side

    def on_clipboard_change(self, item: ClipboardItem) -> None:
        logger.debug("Clipboard changed: %s", item.content_type.value)
        self._observer.on_local_change(item)

    def on_sync_needed(self, item: ClipboardItem) -> None:
        if self._transport is not None:
            self._transport.send(item)

    # Transport side

    def on_connected(self, peer: str) -> None:
        self._observer.on_connected(peer)

    def on_disconnected(self, requested: bool) -> None:
        self._observer.on_disconnected(requested)

    def on_device_info(self, info: DeviceInfo) -> None:
        logger.debug("Received device info: %s (%s)", info.device_name, info.device_type)
        self._observer.on_peer_info(info)

    def on_error(self, error: Exception) -> None:
        self._observer.on_error(error)

    def on_item(self, item: ClipboardItem) -> None:
        if item.source_device == self._device.device_id:
            logger.debug("Dropping clipboard update from our own device")
            return
        self.apply(item)

    def apply(self, item: ClipboardItem) -> bool:
        """Write a remote item to the local clipboard.

        Every content type is written as plain text; file and image
        references are written as their URI and not fetched.

        Args:
            item: Item received from the peer.

        Returns:
            True if the clipboard was written.
        """
        if not item.content_type.is_textual:
            logger.debug("Writing %s reference as URI text", item.content_type.value)
        try:
            written = self._clipboard.write(item.content)
        except (OSError, pyperclip.PyperclipException) as e:
            logger.error("Error copying to clipboard: %s", e)
            self._observer.on_error(e)
            return False
        if self._detector is not None:
            self._detector.mark_applied(written)
        logger.info("Content copied to clipboard: %s", item.content_type.value)
        self._observer.on_remote_applied(item)
        return True
