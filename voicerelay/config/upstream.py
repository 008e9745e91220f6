"""Upstream realtime API configuration (env names and defaults)."""

from __future__ import annotations

ENV_UPSTREAM_URL = "UPSTREAM_URL"
ENV_UPSTREAM_DEFAULT_MODEL = "UPSTREAM_DEFAULT_MODEL"
ENV_UPSTREAM_ALLOWED_MODELS = "UPSTREAM_ALLOWED_MODELS"
ENV_UPSTREAM_OPEN_TIMEOUT_S = "UPSTREAM_OPEN_TIMEOUT_S"
ENV_UPSTREAM_MAX_MESSAGE_BYTES = "UPSTREAM_MAX_MESSAGE_BYTES"
ENV_UPSTREAM_CLOSE_TIMEOUT_S = "UPSTREAM_CLOSE_TIMEOUT_S"

DEFAULT_UPSTREAM_URL = "wss://api.openai.com/v1/realtime"
DEFAULT_UPSTREAM_MODEL = "gpt-4o-realtime-preview-2024-12-17"
DEFAULT_UPSTREAM_OPEN_TIMEOUT_S = 10.0

# Audio deltas can be large; the websockets default (1 MiB) is too tight.
DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES = 10 * 1024 * 1024

# Upper bound on the upstream close handshake during teardown.
DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S = 2.0

# Headers attached when the upstream socket is opened. Browsers cannot set these
# on a WebSocket handshake, which is why the relay exists.
UPSTREAM_AUTH_HEADER = "Authorization"
UPSTREAM_BETA_HEADER = "OpenAI-Beta"
UPSTREAM_BETA_VALUE = "realtime=v1"

__all__ = [
    "ENV_UPSTREAM_URL",
    "ENV_UPSTREAM_DEFAULT_MODEL",
    "ENV_UPSTREAM_ALLOWED_MODELS",
    "ENV_UPSTREAM_OPEN_TIMEOUT_S",
    "ENV_UPSTREAM_MAX_MESSAGE_BYTES",
    "ENV_UPSTREAM_CLOSE_TIMEOUT_S",
    "DEFAULT_UPSTREAM_URL",
    "DEFAULT_UPSTREAM_MODEL",
    "DEFAULT_UPSTREAM_OPEN_TIMEOUT_S",
    "DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES",
    "DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_AUTH_HEADER",
    "UPSTREAM_BETA_HEADER",
    "UPSTREAM_BETA_VALUE",
]
