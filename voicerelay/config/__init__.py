"""Configuration module exports (env names, defaults and protocol constants only)."""

from .audio import AUDIO_SAMPLE_RATE_HZ
from .websocket import WS_ENDPOINT_PATH

__all__ = [
    "AUDIO_SAMPLE_RATE_HZ",
    "WS_ENDPOINT_PATH",
]
