#!/usr/bin/env python3
"""Constants for the sync transport.

These constants control keepalive timing, connection setup and the
optional exponential backoff used when reconnecting to a peer.
"""

# Interval between keepalive pings in seconds.
PING_INTERVAL: float = 30.0

# Time allowed for the WebSocket opening handshake in seconds.
OPEN_TIMEOUT: float = 10.0

# Time allowed for the closing handshake in seconds.
CLOSE_TIMEOUT: float = 2.0

# Retry parameters for exponential backoff reconnection.
# Initial delay between connection attempts in seconds.
INITIAL_WAIT: float = 1.0

# Maximum delay between connection attempts in seconds.
MAX_WAIT: float = 60.0

# Multiplier for exponential backoff (delay = initial * multiplier^attempt).
WAIT_MULTIPLIER: float = 2.0

# Number of connection attempts before giving up.
MAX_ATTEMPTS: int = 5
