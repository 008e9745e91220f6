"""Real-time media (LiveKit room) and tool configuration."""

from __future__ import annotations

ENV_LIVEKIT_URL = "LIVEKIT_URL"
ENV_LIVEKIT_TOKEN_TTL_S = "LIVEKIT_TOKEN_TTL_S"

DEFAULT_LIVEKIT_URL = ""
DEFAULT_LIVEKIT_TOKEN_TTL_S = 3600

LIVEKIT_TOKEN_ALGORITHM = "HS256"
LIVEKIT_ROOM_PREFIX = "room"

ENV_TOOLS_WIKIPEDIA_LANG = "TOOLS_WIKIPEDIA_LANG"
ENV_TOOLS_HTTP_TIMEOUT_S = "TOOLS_HTTP_TIMEOUT_S"

DEFAULT_TOOLS_WIKIPEDIA_LANG = "en"
DEFAULT_TOOLS_HTTP_TIMEOUT_S = 10.0

__all__ = [
    "ENV_LIVEKIT_URL",
    "ENV_LIVEKIT_TOKEN_TTL_S",
    "DEFAULT_LIVEKIT_URL",
    "DEFAULT_LIVEKIT_TOKEN_TTL_S",
    "LIVEKIT_TOKEN_ALGORITHM",
    "LIVEKIT_ROOM_PREFIX",
    "ENV_TOOLS_WIKIPEDIA_LANG",
    "ENV_TOOLS_HTTP_TIMEOUT_S",
    "DEFAULT_TOOLS_WIKIPEDIA_LANG",
    "DEFAULT_TOOLS_HTTP_TIMEOUT_S",
]
