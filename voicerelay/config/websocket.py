"""WebSocket protocol configuration and constants."""

from __future__ import annotations

WS_ENDPOINT_PATH = "/"
WS_QUERY_MODEL = "model"

# Envelope keys (OpenAI realtime event shape)
WS_KEY_TYPE = "type"
WS_KEY_ERROR = "error"

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_INTERNAL_CODE = 1011
WS_CLOSE_TRY_AGAIN_CODE = 1013
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_UNSUPPORTED_MODEL_CODE = 4003
WS_CLOSE_MAX_DURATION_CODE = 4004

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration reached"
WS_CLOSE_UPSTREAM_UNREACHABLE_REASON = "upstream unreachable"
WS_CLOSE_UPSTREAM_CLOSED_REASON = "upstream closed"
WS_CLOSE_UPSTREAM_ERROR_REASON = "upstream connection error"
WS_CLOSE_CLIENT_GONE_REASON = "client disconnected"
WS_CLOSE_QUEUE_FULL_REASON = "upstream session not ready"

# Env names / defaults (parsed in voicerelay.runtime.settings)
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
ENV_WS_MAX_CONNECTION_DURATION_S = "WS_MAX_CONNECTION_DURATION_S"

DEFAULT_WS_IDLE_TIMEOUT_S = 300.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
DEFAULT_WS_MAX_CONNECTION_DURATION_S = 3600.0

# Errors (error.code values of relay-originated error events)
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_UNSUPPORTED_MODEL = "unsupported_model"
WS_ERROR_MALFORMED_ENVELOPE = "malformed_envelope"
WS_ERROR_RATE_LIMITED = "rate_limited"
WS_ERROR_UPSTREAM_UNREACHABLE = "upstream_unreachable"

# error.type of relay-originated error events
WS_ERROR_TYPE_RELAY = "relay_error"

__all__ = [
    "WS_ENDPOINT_PATH",
    "WS_QUERY_MODEL",
    "WS_KEY_TYPE",
    "WS_KEY_ERROR",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_INTERNAL_CODE",
    "WS_CLOSE_TRY_AGAIN_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_UNSUPPORTED_MODEL_CODE",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_CLOSE_UPSTREAM_UNREACHABLE_REASON",
    "WS_CLOSE_UPSTREAM_CLOSED_REASON",
    "WS_CLOSE_UPSTREAM_ERROR_REASON",
    "WS_CLOSE_CLIENT_GONE_REASON",
    "WS_CLOSE_QUEUE_FULL_REASON",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "ENV_WS_MAX_CONNECTION_DURATION_S",
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "DEFAULT_WS_MAX_CONNECTION_DURATION_S",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_UNSUPPORTED_MODEL",
    "WS_ERROR_MALFORMED_ENVELOPE",
    "WS_ERROR_RATE_LIMITED",
    "WS_ERROR_UPSTREAM_UNREACHABLE",
    "WS_ERROR_TYPE_RELAY",
]
