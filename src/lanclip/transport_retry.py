#!/usr/bin/env python3
"""Peer reconnection with exponential backoff.

This module wraps SyncTransport.open() with tenacity so a lost peer can be
reconnected a bounded number of times. The engine only uses it when
reconnecting is enabled.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lanclip.transport_constants import INITIAL_WAIT, MAX_ATTEMPTS, MAX_WAIT, WAIT_MULTIPLIER

if TYPE_CHECKING:
    from lanclip.peer_address import PeerAddress
    from lanclip.transport import SyncTransport

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log a failed attempt before tenacity sleeps."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Connection attempt %d failed: %s, will retry",
        retry_state.attempt_number,
        error,
    )


async def connect_with_retry(
    transport: SyncTransport,
    address: PeerAddress,
    attempts: int = MAX_ATTEMPTS,
) -> bool:
    """Open the transport, retrying with exponential backoff.

    Args:
        transport: The transport to connect.
        address: The peer to connect to.
        attempts: Maximum number of connection attempts.

    Returns:
        True once connected, False after the last attempt failed.
    """
    retrying = AsyncRetrying(
        wait=wait_exponential(
            multiplier=WAIT_MULTIPLIER,
            min=INITIAL_WAIT,
            max=MAX_WAIT,
        ),
        retry=retry_if_exception_type(ConnectionError),
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                await transport.open(address)
    except ConnectionError as e:
        logger.error("Giving up on %s after %d attempts: %s", address, attempts, e)
        transport.report_error(e)
        return False
    return True
