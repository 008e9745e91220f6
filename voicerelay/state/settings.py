"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass

from voicerelay.config.upstream import DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    url: str
    api_key: str
    default_model: str
    allowed_models: tuple[str, ...]
    open_timeout_s: float
    max_message_bytes: int
    close_timeout_s: float = DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int
    ws_message_window_seconds: float
    ws_max_messages_per_window: int
    pending_queue_max: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    max_connection_duration_s: float


@dataclass(frozen=True, slots=True)
class AudioSettings:
    sample_rate_hz: int
    voice: str
    instructions: str
    vad_threshold: float
    vad_prefix_padding_ms: int
    vad_silence_duration_ms: int


@dataclass(frozen=True, slots=True)
class MediaSettings:
    url: str
    api_key: str
    api_secret: str
    token_ttl_s: int


@dataclass(frozen=True, slots=True)
class ToolSettings:
    wikipedia_lang: str
    http_timeout_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    upstream: UpstreamSettings
    limits: LimitsSettings
    websocket: WebSocketSettings
    audio: AudioSettings
    media: MediaSettings
    tools: ToolSettings


__all__ = [
    "AppSettings",
    "AudioSettings",
    "LimitsSettings",
    "MediaSettings",
    "ToolSettings",
    "UpstreamSettings",
    "WebSocketSettings",
]
