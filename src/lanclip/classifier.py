#!/usr/bin/env python3
"""Content classification.

classify() turns a raw clipboard value into a (ContentType, metadata) pair.
It never mutates its input and never raises: unsupported shapes classify
as UNKNOWN with an explanatory note.

Text rules are applied in a fixed order. URL detection sets the type to
URL, email detection only annotates, and code detection runs last so it
overrides URL. Pattern annotations are kept regardless of the final type.
"""

from __future__ import annotations

import logging
from typing import Any

from lanclip.classifier_patterns import (
    CODE_KEYWORD_PATTERN,
    CODE_LANGUAGE_PATTERNS,
    EMAIL_PATTERN,
    UNKNOWN_LANGUAGE,
    URL_PATTERN,
)
from lanclip.item import ContentRef, ContentType
from lanclip.resources import (
    probe_byte_size,
    probe_display_name,
    probe_image_dimensions,
    probe_media_type,
)

logger = logging.getLogger(__name__)

TEXT_ENCODING: str = "utf-8"


def classify(content: Any) -> tuple[ContentType, dict[str, Any]]:
    """Classify clipboard content.

    Args:
        content: A str, a ContentRef, or any other value.

    Returns:
        Tuple of (content_type, metadata).
    """
    if isinstance(content, str):
        return classify_text(content)
    if isinstance(content, ContentRef):
        return classify_reference(content)
    return ContentType.UNKNOWN, {
        "data": str(content),
        "error": "Unsupported content type",
    }


def classify_text(text: str) -> tuple[ContentType, dict[str, Any]]:
    """Classify text content and collect pattern annotations.

    Args:
        text: Clipboard text.

    Returns:
        Tuple of (content_type, metadata).
    """
    content_type = ContentType.TEXT
    metadata: dict[str, Any] = {"length": len(text), "encoding": TEXT_ENCODING}
    patterns: dict[str, list[str]] = {}

    urls = URL_PATTERN.findall(text)
    if urls:
        patterns["url"] = urls
        content_type = ContentType.URL

    emails = EMAIL_PATTERN.findall(text)
    if emails:
        patterns["email"] = emails

    if CODE_KEYWORD_PATTERN.search(text):
        content_type = ContentType.CODE
        metadata["code_language"] = detect_code_language(text)

    if patterns:
        metadata["patterns"] = patterns

    return content_type, metadata


def detect_code_language(text: str) -> str:
    """Return the first language whose patterns match, else "unknown"."""
    for language, patterns in CODE_LANGUAGE_PATTERNS:
        if any(pattern.search(text) for pattern in patterns):
            return language
    return UNKNOWN_LANGUAGE


def classify_reference(ref: ContentRef) -> tuple[ContentType, dict[str, Any]]:
    """Classify a file or image reference.

    Resolves display name, byte size and media type on a best-effort basis.
    Image references are upgraded to IMAGE and annotated with pixel
    dimensions when the header can be read.

    Args:
        ref: The referenced resource.

    Returns:
        Tuple of (content_type, metadata).
    """
    metadata: dict[str, Any] = {"uri": ref.uri}
    try:
        name = probe_display_name(ref.uri)
        if name is not None:
            metadata["name"] = name
        size = probe_byte_size(ref.uri)
        if size is not None:
            metadata["size"] = size

        media_type = probe_media_type(ref.uri)
        if media_type is None or not media_type.startswith("image/"):
            return ContentType.FILE, metadata

        metadata["mime_type"] = media_type
        dimensions = probe_image_dimensions(ref.uri)
        if dimensions is not None:
            metadata["width"], metadata["height"] = dimensions
        return ContentType.IMAGE, metadata
    except Exception as e:
        logger.error("Error processing reference %s: %s", ref.uri, e)
        return ContentType.FILE, {"uri": ref.uri, "error": str(e)}
