#!/usr/bin/env python3
"""
JSON envelope encoding for the clipboard sync protocol.

Every message is one JSON object carried in exactly one WebSocket text
frame, with a mandatory "type" discriminator:

    device_info       device_id, device_name, device_type, capabilities[], timestamp
    ping              device_id, timestamp
    pong              timestamp (echoed from the ping)
    clipboard_update  device_id, timestamp, data: {type, data, size, hash, metadata}

In clipboard_update, data.data is the text for inline content or
{"uri": ...} for file and image references. Timestamps are milliseconds
since the epoch.
"""
from __future__ import annotations

import json
import math
from typing import Any

from lanclip.device import DeviceInfo
from lanclip.item import (
    UNKNOWN_SOURCE,
    ClipboardItem,
    Content,
    ContentRef,
    ContentType,
    generate_id,
)

DEVICE_INFO: str = "device_info"
PING: str = "ping"
PONG: str = "pong"
CLIPBOARD_UPDATE: str = "clipboard_update"

# Maximum size of one frame in bytes (10 MB).
# Prevents memory exhaustion from extremely large clipboard text.
MAX_MESSAGE_SIZE: int = 10485760


class ProtocolError(Exception):
    """
    Exception raised for malformed envelopes.

    Raised when a frame is not a JSON object, lacks the type discriminator,
    or lacks a field required by its type.
    """

    pass


def encode_envelope(envelope: dict[str, Any]) -> str:
    """
    Serialize an envelope to a text frame.

    Args:
        envelope: JSON-compatible mapping with a "type" key.

    Returns:
        Compact JSON text, non-ASCII characters kept as-is.
    """
    return json.dumps(envelope, ensure_ascii=False, separators=(",", ":"))


def encode_device_info(device: DeviceInfo, timestamp: int) -> str:
    """Encode the device_info envelope announcing this device."""
    return encode_envelope({
        "type": DEVICE_INFO,
        "device_id": device.device_id,
        "device_name": device.device_name,
        "device_type": device.device_type,
        "capabilities": list(device.capabilities),
        "timestamp": timestamp,
    })


def encode_ping(device_id: str, timestamp: int) -> str:
    """Encode a keepalive ping."""
    return encode_envelope({"type": PING, "device_id": device_id, "timestamp": timestamp})


def encode_pong(timestamp: int) -> str:
    """Encode a pong echoing the timestamp of the ping it answers."""
    return encode_envelope({"type": PONG, "timestamp": timestamp})


def encode_content(content: Content) -> Any:
    """Return the wire form of item content."""
    if isinstance(content, ContentRef):
        return content.to_dict()
    return content


def encode_clipboard_update(item: ClipboardItem, device_id: str, timestamp: int) -> str:
    """
    Encode a clipboard item as a clipboard_update envelope.

    Args:
        item: The item to send.
        device_id: Id of the sending device.
        timestamp: Send time in milliseconds.

    Returns:
        The encoded text frame.
    """
    return encode_envelope({
        "type": CLIPBOARD_UPDATE,
        "device_id": device_id,
        "timestamp": timestamp,
        "data": {
            "type": item.content_type.value,
            "data": encode_content(item.content),
            "size": item.size,
            "hash": item.hash,
            "metadata": item.metadata,
        },
    })


def decode_envelope(message: str) -> dict[str, Any]:
    """
    Parse a text frame into an envelope.

    Args:
        message: Raw frame text.

    Returns:
        The envelope mapping.

    Raises:
        ProtocolError: On invalid JSON, a non-object, or a missing type.
    """
    try:
        envelope = json.loads(message)
    except (ValueError, RecursionError) as e:
        raise ProtocolError(f"Invalid JSON envelope: {e}") from e
    if not isinstance(envelope, dict):
        raise ProtocolError(f"Envelope is not an object: {type(envelope).__name__}")
    if not isinstance(envelope.get("type"), str):
        raise ProtocolError("Envelope has no type")
    return envelope


def _require(mapping: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    """Return mapping[key], raising ProtocolError if it is missing or mistyped."""
    if key not in mapping:
        raise ProtocolError(f"Missing required field: {key}")
    value = mapping[key]
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ProtocolError(f"Field {key} has unexpected type {type(value).__name__}")
    return value


def decode_timestamp(envelope: dict[str, Any]) -> int:
    """Return the integer timestamp of an envelope.

    Raises:
        ProtocolError: If the timestamp is missing, not a number, or not finite.
    """
    timestamp = _require(envelope, "timestamp", (int, float))
    if isinstance(timestamp, float) and not math.isfinite(timestamp):
        raise ProtocolError(f"Timestamp is not finite: {timestamp}")
    return int(timestamp)


def decode_content(value: Any) -> Content:
    """Convert wire content back to str or ContentRef.

    Raises:
        ProtocolError: If the value is neither text nor a recognized object.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("uri"), str):
        return ContentRef(value["uri"])
    # Peers that embed their whole annotated record carry the text under "data".
    if isinstance(value, dict) and isinstance(value.get("data"), str):
        return value["data"]
    raise ProtocolError(f"Unsupported content shape: {type(value).__name__}")


def decode_clipboard_update(envelope: dict[str, Any], received_at: int) -> ClipboardItem:
    """
    Decode a clipboard_update envelope into a ClipboardItem.

    The item gets a fresh id and is stamped with the local receipt time.
    Its source_device is the sender's device_id, or UNKNOWN_SOURCE if the
    sender did not name itself.

    Args:
        envelope: Parsed envelope.
        received_at: Local receipt time in milliseconds.

    Returns:
        The decoded item.

    Raises:
        ProtocolError: If the data block or its type/data fields are missing.
    """
    data = _require(envelope, "data", dict)
    content_type = ContentType.from_label(_require(data, "type", str))
    content = decode_content(_require(data, "data", (str, dict)))
    metadata = data.get("metadata")
    source = envelope.get("device_id")
    size = data.get("size", 0)
    return ClipboardItem(
        id=generate_id(received_at),
        content=content,
        content_type=content_type,
        source_device=source if isinstance(source, str) and source else UNKNOWN_SOURCE,
        timestamp=received_at,
        size=size if isinstance(size, int) else 0,
        hash=str(data.get("hash", "")),
        metadata=metadata if isinstance(metadata, dict) else {},
    )


def decode_device_info(envelope: dict[str, Any]) -> DeviceInfo:
    """
    Decode a device_info envelope into the peer's DeviceInfo.

    Raises:
        ProtocolError: If device_id, device_name or device_type is missing.
    """
    capabilities = envelope.get("capabilities")
    if not isinstance(capabilities, list):
        capabilities = []
    return DeviceInfo(
        device_id=_require(envelope, "device_id", str),
        device_name=_require(envelope, "device_name", str),
        device_type=_require(envelope, "device_type", str),
        capabilities=tuple(str(c) for c in capabilities),
    )
