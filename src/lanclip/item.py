#!/usr/bin/env python3
"""Clipboard item data model.

A ClipboardItem is the unit of synchronization. Its content is either
inline text or a ContentRef pointing at a file or image by URI; only the
reference travels over the wire, never the referenced bytes.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from lanclip.hashing import hash_string

# Source device label for items that have not been transmitted yet.
LOCAL_SOURCE: str = "local"

# Source device label for received items that did not name a sender.
UNKNOWN_SOURCE: str = "unknown"


class ContentType(str, Enum):
    """Top-level content classification of a clipboard item."""

    TEXT = "text"
    URL = "url"
    EMAIL = "email"
    CODE = "code"
    FILE = "file"
    IMAGE = "image"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: str) -> ContentType:
        """Map a wire label to a ContentType, falling back to UNKNOWN."""
        try:
            return cls(label)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_textual(self) -> bool:
        return self not in (ContentType.FILE, ContentType.IMAGE)


@dataclass(frozen=True)
class ContentRef:
    """Reference to file or image content by URI."""

    uri: str

    def to_dict(self) -> dict[str, str]:
        return {"uri": self.uri}

    def __str__(self) -> str:
        return self.uri


Content = Union[str, ContentRef]


@dataclass(frozen=True)
class ClipboardItem:
    """A classified clipboard snapshot ready for synchronization.

    Attributes:
        id: Opaque identifier, assigned once at creation.
        content: Inline text or a ContentRef.
        content_type: Classification result.
        source_device: Originating device id, LOCAL_SOURCE before sending.
        timestamp: Creation time in milliseconds since the epoch.
        size: UTF-8 byte length of the canonical content form.
        hash: Content fingerprint, used only for change detection.
        metadata: Classifier annotations, keys vary by content_type.
    """

    id: str
    content: Content
    content_type: ContentType
    source_device: str
    timestamp: int
    size: int
    hash: str
    metadata: dict[str, Any] = field(default_factory=dict)


def now_ms() -> int:
    """Return the current wall clock time in milliseconds."""
    return time.time_ns() // 1_000_000


def generate_id(timestamp: int | None = None) -> str:
    """Generate a best-effort unique id from a timestamp and a random salt.

    The salt makes ids created in the same millisecond differ. Uniqueness is
    not cryptographically guaranteed.
    """
    if timestamp is None:
        timestamp = now_ms()
    return hash_string(f"{timestamp}{uuid.uuid4()}")
