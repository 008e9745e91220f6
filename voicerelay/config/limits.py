"""Admission control, rate limit and buffering configuration (env names and defaults)."""

from __future__ import annotations

ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"
ENV_WS_MESSAGE_WINDOW_SECONDS = "WS_MESSAGE_WINDOW_SECONDS"
ENV_WS_MAX_MESSAGES_PER_WINDOW = "WS_MAX_MESSAGES_PER_WINDOW"
ENV_RELAY_PENDING_QUEUE_MAX = "RELAY_PENDING_QUEUE_MAX"

DEFAULT_MAX_CONCURRENT_CONNECTIONS = 100
DEFAULT_WS_MESSAGE_WINDOW_SECONDS = 60.0

# Audio streaming is message-heavy. A 4096-sample frame at 24kHz is ~170ms, so a
# client sends ~350 append messages/minute; keep plenty of headroom for smaller frames.
DEFAULT_WS_MAX_MESSAGES_PER_WINDOW = 5000

# Messages held per channel until the upstream session exists. 0 disables the cap.
DEFAULT_RELAY_PENDING_QUEUE_MAX = 2000

__all__ = [
    "ENV_MAX_CONCURRENT_CONNECTIONS",
    "ENV_WS_MESSAGE_WINDOW_SECONDS",
    "ENV_WS_MAX_MESSAGES_PER_WINDOW",
    "ENV_RELAY_PENDING_QUEUE_MAX",
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_WS_MESSAGE_WINDOW_SECONDS",
    "DEFAULT_WS_MAX_MESSAGES_PER_WINDOW",
    "DEFAULT_RELAY_PENDING_QUEUE_MAX",
]
