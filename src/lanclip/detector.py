#!/usr/bin/env python3
"""Polling clipboard change detector.

The detector reads the local clipboard at a fixed interval, fingerprints
what it finds and reports a change only when the fingerprint differs from
the last one it recorded. The "last seen" fingerprint is the anti-echo
cursor: the coordinator moves it with mark_applied() when it writes remote
content, so the next tick sees no change.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING, Protocol

from lanclip.classifier import classify
from lanclip.hashing import compute_fingerprint, content_size
from lanclip.item import LOCAL_SOURCE, ClipboardItem, Content, generate_id, now_ms

if TYPE_CHECKING:
    from lanclip.clipboard import ClipboardBackend

logger = logging.getLogger(__name__)

# Normal delay between clipboard reads in seconds.
POLL_INTERVAL: float = 0.1

# Delay after a failed tick in seconds, applied for one cycle only.
ERROR_INTERVAL: float = 1.0


class ChangeListener(Protocol):
    """Receiver of local clipboard changes.

    Both methods are called synchronously, in this order, for every change.
    """

    def on_clipboard_change(self, item: ClipboardItem) -> None: ...

    def on_sync_needed(self, item: ClipboardItem) -> None: ...


def build_item(content: Content, timestamp: int, source_device: str = LOCAL_SOURCE) -> ClipboardItem:
    """Classify content and wrap it in a new ClipboardItem.

    Args:
        content: Clipboard content.
        timestamp: Creation time in milliseconds.
        source_device: Originating device id.

    Returns:
        The new item.
    """
    content_type, metadata = classify(content)
    return ClipboardItem(
        id=generate_id(timestamp),
        content=content,
        content_type=content_type,
        source_device=source_device,
        timestamp=timestamp,
        size=content_size(content),
        hash=compute_fingerprint(content),
        metadata=metadata,
    )


class ChangeDetector:
    """Cancellable periodic clipboard poller.

    Attributes:
        last_fingerprint: Fingerprint of the last content seen or applied.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        listener: ChangeListener,
        interval: float = POLL_INTERVAL,
        error_interval: float = ERROR_INTERVAL,
    ) -> None:
        self._clipboard = clipboard
        self._listener = listener
        self.interval = interval
        self.error_interval = error_interval
        self.last_fingerprint: str | None = None
        self._last_timestamp = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def is_monitoring(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the poll loop on the running event loop; no-op if active."""
        if self.is_monitoring:
            logger.warning("Clipboard monitoring already active")
            return
        self._task = asyncio.create_task(self._run(), name="lanclip-detector")
        logger.info("Clipboard monitoring started")

    async def stop(self) -> None:
        """Cancel the poll loop and wait for it to finish; no-op if inactive."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Clipboard monitoring stopped")

    def mark_applied(self, content: Content) -> None:
        """Record content written from a remote item as already seen."""
        self.last_fingerprint = compute_fingerprint(content)

    def check_once(self) -> ClipboardItem | None:
        """Read the clipboard once and report a change if there is one.

        Returns:
            The new item if the content changed, else None.

        Raises:
            Exception: Whatever the clipboard backend or a listener raises.
        """
        content = self._clipboard.read()
        if content is None or content == "":
            return None

        fingerprint = compute_fingerprint(content)
        if fingerprint == self.last_fingerprint:
            return None
        self.last_fingerprint = fingerprint

        item = build_item(content, self._next_timestamp())
        logger.info("Clipboard content changed, type: %s", item.content_type.value)
        self._listener.on_clipboard_change(item)
        self._listener.on_sync_needed(item)
        return item

    def _next_timestamp(self) -> int:
        """Return a creation time strictly greater than the previous one."""
        self._last_timestamp = max(now_ms(), self._last_timestamp + 1)
        return self._last_timestamp

    async def _run(self) -> None:
        """Poll until cancelled. Tick errors never end the loop."""
        while True:
            try:
                self.check_once()
            except Exception:
                logger.exception("Error in clipboard monitoring loop")
                await asyncio.sleep(self.error_interval)
                continue
            await asyncio.sleep(self.interval)
