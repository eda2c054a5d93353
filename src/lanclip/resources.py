#!/usr/bin/env python3
"""Read-only metadata probes for referenced clipboard resources.

Each probe is best effort: it returns None (or an empty result) when the
resource cannot be resolved, so callers simply omit the missing keys.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from urllib.parse import unquote, urlparse

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


def resolve_local_path(uri: str) -> Path | None:
    """Return the filesystem path of a file:// URI or a bare path.

    Args:
        uri: Resource locator.

    Returns:
        The path, or None for URIs with another scheme.
    """
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme == "":
        return Path(uri)
    return None


def probe_display_name(uri: str) -> str | None:
    """Return the last path component of the resource, if any."""
    name = Path(unquote(urlparse(uri).path)).name
    return name or None


def probe_byte_size(uri: str) -> int | None:
    """Return the byte size of a local resource, or None if unavailable."""
    path = resolve_local_path(uri)
    if path is None:
        return None
    try:
        return path.stat().st_size
    except OSError as e:
        logger.debug("Cannot stat %s: %s", uri, e)
        return None


def probe_media_type(uri: str) -> str | None:
    """Guess the media type of the resource from its name."""
    media_type, _ = mimetypes.guess_type(unquote(urlparse(uri).path))
    return media_type


def probe_image_dimensions(uri: str) -> tuple[int, int] | None:
    """Read pixel width and height without decoding the image data.

    Pillow's Image.open only parses the header; pixel data is not loaded
    until requested, which never happens here.

    Args:
        uri: Resource locator of a local image.

    Returns:
        (width, height), or None if the image cannot be opened.
    """
    path = resolve_local_path(uri)
    if path is None:
        return None
    try:
        with Image.open(path) as image:
            return image.size
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.warning("Could not get image dimensions for %s: %s", uri, e)
        return None
