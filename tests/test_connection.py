#!/usr/bin/env python3
"""Tests for ping bookkeeping on Connection."""
import pytest

from conftest import FakeWebSocket
from lanclip.connection import Connection


@pytest.fixture
def connection() -> Connection:
    """Create a connection over a fake WebSocket."""
    return Connection(websocket=FakeWebSocket(), peer="peer")


def test_no_ping_is_never_overdue(connection: Connection) -> None:
    """Test a connection that has not pinged cannot time out."""
    assert not connection.ping_overdue(10_000, 1)


def test_overdue_counts_from_first_unanswered_ping(connection: Connection) -> None:
    """Test later pings keep the oldest unanswered ping as the reference."""
    connection.record_ping(1000)
    connection.record_ping(2000)
    connection.record_ping(3000)

    assert connection.first_unanswered_ping == 1000
    assert connection.last_ping_sent == 3000
    assert connection.ping_overdue(2600, 1500)
    assert not connection.ping_overdue(2500, 1500)


def test_pong_answers_outstanding_pings(connection: Connection) -> None:
    """Test a pong resets the timeout until the next ping."""
    connection.record_ping(1000)
    connection.record_pong(1100)

    assert connection.first_unanswered_ping is None
    assert connection.last_pong_received == 1100
    assert not connection.ping_overdue(99_999, 10)

    connection.record_ping(2000)
    assert connection.first_unanswered_ping == 2000
