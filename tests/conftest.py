#!/usr/bin/env python3
"""Pytest fixtures for lanclip tests.

Provides an in-memory clipboard, a fake WebSocket connection, a local
device identity and a helper to let background tasks run.
"""

import asyncio
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lanclip.clipboard import interpret_text
from lanclip.device import DeviceInfo
from lanclip.item import ContentRef


class MemoryClipboard:
    """ClipboardBackend holding content in memory.

    Setting fail_reads makes the next reads raise OSError.
    """

    def __init__(self, content: Any = None) -> None:
        self.content = content
        self.writes: list[Any] = []
        self.fail_reads = 0

    def read(self) -> Any:
        if self.fail_reads:
            self.fail_reads -= 1
            raise OSError("clipboard unavailable")
        return self.content

    def write(self, content: Any) -> Any:
        text = content.uri if isinstance(content, ContentRef) else content
        self.writes.append(text)
        self.content = interpret_text(text)
        return self.content


class FakeWebSocket:
    """Stand-in for a websockets connection.

    Frames passed to feed() are yielded by async iteration; close() or
    close_from_peer() ends the iteration. Frames sent are kept in sent.
    """

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_code: int | None = None
        self.remote_address = ("192.0.2.10", 50000)
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        if self.closed:
            raise OSError("send on closed socket")
        self.sent.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if not self.closed:
            self.closed = True
            self.close_code = code
            self._incoming.put_nowait(None)

    def feed(self, message: Any) -> None:
        self._incoming.put_nowait(message)

    def close_from_peer(self) -> None:
        self._incoming.put_nowait(None)

    def sent_envelopes(self, message_type: str | None = None) -> list[dict]:
        envelopes = [json.loads(m) for m in self.sent]
        if message_type is None:
            return envelopes
        return [e for e in envelopes if e["type"] == message_type]

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> Any:
        message = await self._incoming.get()
        if message is None:
            raise StopAsyncIteration
        return message


async def settle(delay: float = 0.01) -> None:
    """Give background tasks a chance to run."""
    await asyncio.sleep(delay)


@pytest.fixture
def memory_clipboard() -> MemoryClipboard:
    """Create an empty in-memory clipboard."""
    return MemoryClipboard()


@pytest.fixture
def fake_websocket() -> FakeWebSocket:
    """Create a fake WebSocket connection."""
    return FakeWebSocket()


@pytest.fixture
def connector(fake_websocket: FakeWebSocket) -> AsyncMock:
    """Create a connector returning the fake WebSocket."""
    return AsyncMock(return_value=fake_websocket)


@pytest.fixture
def local_device() -> DeviceInfo:
    """Create a fixed local identity."""
    return DeviceInfo(device_id="local-device-id", device_name="test box")


@pytest.fixture
def listener() -> MagicMock:
    """Create a mock transport/detector listener."""
    return MagicMock()


@pytest.fixture
def make_transport(
    local_device: DeviceInfo, listener: MagicMock, connector: AsyncMock
) -> Callable[..., Any]:
    """Return a factory for transports wired to the fake connector."""
    from lanclip.transport import SyncTransport

    def factory(**kwargs: Any) -> SyncTransport:
        kwargs.setdefault("connector", connector)
        return SyncTransport(local_device, listener, **kwargs)

    return factory
