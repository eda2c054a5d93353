#!/usr/bin/env python3
"""Local clipboard access.

The engine needs only two primitives from its host: read the current
content and replace it. ClipboardBackend describes them; PyperclipClipboard
implements them with pyperclip, which picks the platform mechanism
(xclip/xsel/wl-clipboard, pbcopy, the Windows API).

Clipboard text consisting of a single file:// URI is reported as a
ContentRef so the classifier can treat it as a file or image reference.
"""

from __future__ import annotations

import logging
from typing import Protocol

import pyperclip

from lanclip.item import Content, ContentRef

logger = logging.getLogger(__name__)

FILE_URI_PREFIX: str = "file://"


class ClipboardBackend(Protocol):
    """Readable and writable local clipboard."""

    def read(self) -> Content | None:
        """Return the current content, or None if the clipboard is empty."""
        ...

    def write(self, content: Content) -> Content:
        """Replace the clipboard content.

        Returns:
            The content as a subsequent read() will report it.
        """
        ...


def interpret_text(text: str) -> Content:
    """Return a ContentRef for single-line file URIs, else the text itself."""
    stripped = text.strip()
    if stripped.startswith(FILE_URI_PREFIX) and "\n" not in stripped:
        return ContentRef(stripped)
    return text


class PyperclipClipboard:
    """ClipboardBackend backed by pyperclip."""

    def read(self) -> Content | None:
        """Read clipboard text.

        Raises:
            pyperclip.PyperclipException: If no clipboard mechanism works.
        """
        text = pyperclip.paste()
        if not text:
            return None
        return interpret_text(text)

    def write(self, content: Content) -> Content:
        """Write content as plain text; references are written as their URI."""
        text = content.uri if isinstance(content, ContentRef) else content
        pyperclip.copy(text)
        logger.debug("Wrote %d characters to clipboard", len(text))
        return interpret_text(text)
