"""Audio format and realtime session configuration."""

from __future__ import annotations

# The whole session runs at one rate; the relay never resamples.
AUDIO_SAMPLE_RATE_HZ: int = 24000
AUDIO_CHANNELS: int = 1
AUDIO_FORMAT: str = "pcm16"

PCM16_POSITIVE_SCALE: float = 32767.0
PCM16_NEGATIVE_SCALE: float = 32768.0

ENV_REALTIME_VOICE = "REALTIME_VOICE"
ENV_REALTIME_INSTRUCTIONS = "REALTIME_INSTRUCTIONS"
ENV_VAD_THRESHOLD = "VAD_THRESHOLD"
ENV_VAD_PREFIX_PADDING_MS = "VAD_PREFIX_PADDING_MS"
ENV_VAD_SILENCE_DURATION_MS = "VAD_SILENCE_DURATION_MS"

DEFAULT_REALTIME_VOICE = "alloy"
DEFAULT_REALTIME_INSTRUCTIONS = (
    "You are a friendly, accurate voice assistant. Keep answers short and conversational, "
    "and use the available tools when the user asks about weather, time or general knowledge."
)
DEFAULT_VAD_THRESHOLD = 0.5
DEFAULT_VAD_PREFIX_PADDING_MS = 300
DEFAULT_VAD_SILENCE_DURATION_MS = 500

__all__ = [
    "AUDIO_SAMPLE_RATE_HZ",
    "AUDIO_CHANNELS",
    "AUDIO_FORMAT",
    "PCM16_POSITIVE_SCALE",
    "PCM16_NEGATIVE_SCALE",
    "ENV_REALTIME_VOICE",
    "ENV_REALTIME_INSTRUCTIONS",
    "ENV_VAD_THRESHOLD",
    "ENV_VAD_PREFIX_PADDING_MS",
    "ENV_VAD_SILENCE_DURATION_MS",
    "DEFAULT_REALTIME_VOICE",
    "DEFAULT_REALTIME_INSTRUCTIONS",
    "DEFAULT_VAD_THRESHOLD",
    "DEFAULT_VAD_PREFIX_PADDING_MS",
    "DEFAULT_VAD_SILENCE_DURATION_MS",
]
