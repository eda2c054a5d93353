#!/usr/bin/env python3
"""Tests for device identity and item helpers."""
from unittest.mock import patch

from lanclip.device import CAPABILITIES, DEVICE_TYPE, create_local_device
from lanclip.item import ContentType, generate_id


def test_device_id_is_regenerated_each_session() -> None:
    """Test two sessions never share a device id."""
    assert create_local_device().device_id != create_local_device().device_id


def test_device_name_defaults_to_host_name() -> None:
    """Test the host name is used when no name is given."""
    with patch("lanclip.device.platform.node", return_value="workstation"):
        device = create_local_device()
    assert device.device_name == "workstation"
    assert device.device_type == DEVICE_TYPE
    assert device.capabilities == CAPABILITIES


def test_explicit_device_name() -> None:
    """Test an explicit name overrides the host name."""
    assert create_local_device("Desk").device_name == "Desk"


def test_generate_id_is_hex_digest() -> None:
    """Test ids look like MD5 hex digests."""
    value = generate_id(123)
    assert len(value) == 32
    int(value, 16)


def test_content_type_labels() -> None:
    """Test wire labels map to content types with an unknown fallback."""
    assert ContentType.from_label("code") is ContentType.CODE
    assert ContentType.from_label("mystery") is ContentType.UNKNOWN
    assert ContentType.TEXT.is_textual
    assert not ContentType.IMAGE.is_textual
