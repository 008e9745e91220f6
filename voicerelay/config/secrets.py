"""Secrets configuration (env names only; values are read in voicerelay.runtime.settings)."""

from __future__ import annotations

ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_LIVEKIT_API_KEY = "LIVEKIT_API_KEY"
ENV_LIVEKIT_API_SECRET = "LIVEKIT_API_SECRET"

__all__ = ["ENV_LIVEKIT_API_KEY", "ENV_LIVEKIT_API_SECRET", "ENV_OPENAI_API_KEY"]
