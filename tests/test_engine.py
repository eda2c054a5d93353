#!/usr/bin/env python3
"""
Tests for the sync engine.

Exercises the detector, coordinator and transport together against an
in-memory clipboard and a fake WebSocket.
"""
from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakeWebSocket, MemoryClipboard, settle
from lanclip.connection import ConnectionState
from lanclip.detector import build_item
from lanclip.device import DeviceInfo
from lanclip.engine import EngineConfig, SyncEngine
from lanclip.protocol import encode_clipboard_update


@pytest.fixture
def config() -> EngineConfig:
    """Create a fast-polling engine configuration."""
    return EngineConfig(poll_interval=0.005, error_interval=0.005)


@pytest.fixture
def engine(
    memory_clipboard: MemoryClipboard,
    config: EngineConfig,
    connector: AsyncMock,
    local_device: DeviceInfo,
) -> SyncEngine:
    """Create an engine wired to the fake connector."""
    return SyncEngine(memory_clipboard, config, connector=connector, device=local_device)


@pytest.mark.asyncio
async def test_local_change_is_sent_to_peer(
    engine: SyncEngine, memory_clipboard: MemoryClipboard, fake_websocket: FakeWebSocket
) -> None:
    """Test a clipboard change is broadcast over the connection."""
    assert await engine.start("ws://10.0.0.2:8765") is True
    try:
        memory_clipboard.content = "copied on desktop"
        await settle(0.05)
    finally:
        await engine.stop()

    updates = fake_websocket.sent_envelopes("clipboard_update")
    assert [u["data"]["data"] for u in updates] == ["copied on desktop"]


@pytest.mark.asyncio
async def test_remote_update_is_applied_without_echo(
    engine: SyncEngine, memory_clipboard: MemoryClipboard, fake_websocket: FakeWebSocket
) -> None:
    """Test an applied remote update is never sent back to the peer."""
    await engine.start("ws://10.0.0.2:8765")
    try:
        fake_websocket.feed(encode_clipboard_update(build_item("from phone", 1), "phone-1", 1))
        await settle(0.05)
    finally:
        await engine.stop()

    assert memory_clipboard.writes == ["from phone"]
    assert fake_websocket.sent_envelopes("clipboard_update") == []


@pytest.mark.asyncio
async def test_stop_closes_everything(engine: SyncEngine, fake_websocket: FakeWebSocket) -> None:
    """Test stop cancels monitoring and shuts the transport down."""
    await engine.start("ws://10.0.0.2:8765")
    await engine.stop()

    assert not engine.detector.is_monitoring
    assert engine.transport.state is ConnectionState.CLOSED
    assert fake_websocket.closed


@pytest.mark.asyncio
async def test_start_without_address_only_monitors(
    engine: SyncEngine, connector: AsyncMock
) -> None:
    """Test serve-mode start runs the detector without connecting."""
    assert await engine.start() is True
    assert engine.detector.is_monitoring
    connector.assert_not_called()
    await engine.stop()


@pytest.mark.asyncio
async def test_peer_loss_without_reconnect_stays_disconnected(
    engine: SyncEngine, connector: AsyncMock, fake_websocket: FakeWebSocket
) -> None:
    """Test the baseline does not reconnect after losing the peer."""
    await engine.start("ws://10.0.0.2:8765")
    fake_websocket.close_from_peer()
    await settle(0.05)

    assert engine.transport.state is ConnectionState.DISCONNECTED
    assert connector.await_count == 1
    await engine.stop()


@pytest.mark.asyncio
async def test_peer_loss_with_reconnect_reconnects(
    memory_clipboard: MemoryClipboard, local_device: DeviceInfo
) -> None:
    """Test an enabled reconnect policy opens a new connection."""
    first, second = FakeWebSocket(), FakeWebSocket()
    connector = AsyncMock(side_effect=[first, OSError("refused"), second])
    config = EngineConfig(poll_interval=0.005, reconnect=True, reconnect_attempts=3)
    engine = SyncEngine(memory_clipboard, config, connector=connector, device=local_device)

    with patch("lanclip.transport_retry.INITIAL_WAIT", 0), \
        patch("lanclip.transport_retry.MAX_WAIT", 0), \
        patch("lanclip.transport_retry.WAIT_MULTIPLIER", 0):
        await engine.start("ws://10.0.0.2:8765")
        first.close_from_peer()
        await settle(0.05)

    assert connector.await_count == 3
    assert engine.transport.state is ConnectionState.OPEN
    assert second.sent_envelopes("device_info")
    await engine.stop()
    assert second.closed
