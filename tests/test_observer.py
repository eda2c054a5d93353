#!/usr/bin/env python3
"""Tests for the CLI status observer."""
import pytest

from lanclip.device import DeviceInfo
from lanclip.observer import StatusObserver


def test_status_lines_go_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """Test connection status is printed to stderr."""
    observer = StatusObserver()
    observer.on_connected("ws://10.0.0.2:8765")
    observer.on_peer_info(DeviceInfo(device_id="p", device_name="Pixel", device_type="android"))
    observer.on_disconnected(False)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Connected to ws://10.0.0.2:8765" in captured.err
    assert "Paired with Pixel (android)" in captured.err
    assert "Disconnected from peer" in captured.err


def test_requested_disconnect_is_silent(capsys: pytest.CaptureFixture[str]) -> None:
    """Test a shutdown we asked for prints nothing."""
    StatusObserver().on_disconnected(True)
    assert capsys.readouterr().err == ""
