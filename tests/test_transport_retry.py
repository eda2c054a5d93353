#!/usr/bin/env python3
"""Tests for reconnection with exponential backoff."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import FakeWebSocket
from lanclip.connection import ConnectionState
from lanclip.peer_address import parse_peer_address


@pytest.fixture(autouse=True)
def no_backoff_wait():
    """Make tenacity waits zero-length."""
    with patch("lanclip.transport_retry.INITIAL_WAIT", 0), \
        patch("lanclip.transport_retry.MAX_WAIT", 0), \
        patch("lanclip.transport_retry.WAIT_MULTIPLIER", 0):
        yield


@pytest.mark.asyncio
async def test_connect_with_retry_succeeds_after_failures(make_transport) -> None:
    """Test transient failures are retried until the connection opens."""
    from lanclip.transport_retry import connect_with_retry

    websocket = FakeWebSocket()
    connector = AsyncMock(side_effect=[OSError("refused"), OSError("refused"), websocket])
    transport = make_transport(connector=connector)

    result = await connect_with_retry(transport, parse_peer_address("ws://h:1"), attempts=5)

    assert result is True
    assert connector.await_count == 3
    assert transport.state is ConnectionState.OPEN
    await transport.disconnect()


@pytest.mark.asyncio
async def test_connect_with_retry_gives_up(make_transport, listener: MagicMock) -> None:
    """Test retrying stops after the configured number of attempts."""
    from lanclip.transport_retry import connect_with_retry

    connector = AsyncMock(side_effect=OSError("refused"))
    transport = make_transport(connector=connector)

    result = await connect_with_retry(transport, parse_peer_address("ws://h:1"), attempts=3)

    assert result is False
    assert connector.await_count == 3
    assert transport.state is ConnectionState.DISCONNECTED
    assert isinstance(listener.on_error.call_args.args[0], ConnectionError)


@pytest.mark.asyncio
async def test_connect_with_retry_after_shutdown(make_transport, connector: AsyncMock) -> None:
    """Test a shut down transport is never reopened."""
    from lanclip.transport_retry import connect_with_retry

    transport = make_transport()
    await transport.shutdown()

    assert await connect_with_retry(transport, parse_peer_address("ws://h:1"), attempts=2) is False
    connector.assert_not_called()
