#!/usr/bin/env python3
"""Device identity.

The device id is regenerated every session from a timestamp and a random
salt; it is not persisted across restarts.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field

from lanclip.item import ContentType, generate_id

DEVICE_TYPE: str = "desktop"

CAPABILITIES: tuple[str, ...] = (
    ContentType.TEXT.value,
    ContentType.URL.value,
    ContentType.CODE.value,
    ContentType.IMAGE.value,
    ContentType.FILE.value,
)


@dataclass(frozen=True)
class DeviceInfo:
    """Identity announced in a device_info envelope.

    Attributes:
        device_id: Opaque device identifier.
        device_name: Human-readable name.
        device_type: Device class, e.g. "desktop" or "android".
        capabilities: Content types the device can handle.
    """

    device_id: str
    device_name: str
    device_type: str = DEVICE_TYPE
    capabilities: tuple[str, ...] = field(default=CAPABILITIES)


def default_device_name() -> str:
    """Return the host name, or a generic label if it is unavailable."""
    return platform.node() or "lanclip device"


def create_local_device(name: str | None = None) -> DeviceInfo:
    """Create a fresh identity for this session."""
    return DeviceInfo(device_id=generate_id(), device_name=name or default_device_name())
