"""Environment parsing for runtime settings.

Env names and defaults are declared in `voicerelay/config/*`; this module
resolves them into the frozen dataclasses from `voicerelay.state.settings`.
"""

from __future__ import annotations

import os

from voicerelay.config.audio import (
    ENV_VAD_THRESHOLD,
    AUDIO_SAMPLE_RATE_HZ,
    ENV_REALTIME_VOICE,
    DEFAULT_VAD_THRESHOLD,
    DEFAULT_REALTIME_VOICE,
    ENV_REALTIME_INSTRUCTIONS,
    ENV_VAD_PREFIX_PADDING_MS,
    ENV_VAD_SILENCE_DURATION_MS,
    DEFAULT_REALTIME_INSTRUCTIONS,
    DEFAULT_VAD_PREFIX_PADDING_MS,
    DEFAULT_VAD_SILENCE_DURATION_MS,
)
from voicerelay.config.media import (
    ENV_LIVEKIT_URL,
    DEFAULT_LIVEKIT_URL,
    ENV_LIVEKIT_TOKEN_TTL_S,
    ENV_TOOLS_HTTP_TIMEOUT_S,
    ENV_TOOLS_WIKIPEDIA_LANG,
    DEFAULT_LIVEKIT_TOKEN_TTL_S,
    DEFAULT_TOOLS_HTTP_TIMEOUT_S,
    DEFAULT_TOOLS_WIKIPEDIA_LANG,
)
from voicerelay.config.limits import (
    ENV_RELAY_PENDING_QUEUE_MAX,
    ENV_WS_MESSAGE_WINDOW_SECONDS,
    ENV_MAX_CONCURRENT_CONNECTIONS,
    ENV_WS_MAX_MESSAGES_PER_WINDOW,
    DEFAULT_RELAY_PENDING_QUEUE_MAX,
    DEFAULT_WS_MESSAGE_WINDOW_SECONDS,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_WS_MAX_MESSAGES_PER_WINDOW,
)
from voicerelay.config.secrets import ENV_OPENAI_API_KEY, ENV_LIVEKIT_API_KEY, ENV_LIVEKIT_API_SECRET
from voicerelay.config.upstream import (
    ENV_UPSTREAM_URL,
    DEFAULT_UPSTREAM_URL,
    DEFAULT_UPSTREAM_MODEL,
    ENV_UPSTREAM_DEFAULT_MODEL,
    ENV_UPSTREAM_OPEN_TIMEOUT_S,
    ENV_UPSTREAM_ALLOWED_MODELS,
    ENV_UPSTREAM_MAX_MESSAGE_BYTES,
    ENV_UPSTREAM_CLOSE_TIMEOUT_S,
    DEFAULT_UPSTREAM_OPEN_TIMEOUT_S,
    DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES,
    DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S,
)
from voicerelay.config.websocket import (
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
    ENV_WS_MAX_CONNECTION_DURATION_S,
    DEFAULT_WS_MAX_CONNECTION_DURATION_S,
)
from voicerelay.state.settings import (
    AppSettings,
    MediaSettings,
    AudioSettings,
    ToolSettings,
    LimitsSettings,
    UpstreamSettings,
    WebSocketSettings,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _list_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name) or ""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _secret_env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _load_upstream_settings() -> UpstreamSettings:
    return UpstreamSettings(
        url=_str_env(ENV_UPSTREAM_URL, DEFAULT_UPSTREAM_URL),
        api_key=_secret_env(ENV_OPENAI_API_KEY),
        default_model=_str_env(ENV_UPSTREAM_DEFAULT_MODEL, DEFAULT_UPSTREAM_MODEL),
        allowed_models=_list_env(ENV_UPSTREAM_ALLOWED_MODELS),
        open_timeout_s=max(0.1, _float_env(ENV_UPSTREAM_OPEN_TIMEOUT_S, DEFAULT_UPSTREAM_OPEN_TIMEOUT_S)),
        max_message_bytes=max(1, _int_env(ENV_UPSTREAM_MAX_MESSAGE_BYTES, DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES)),
        close_timeout_s=max(0.1, _float_env(ENV_UPSTREAM_CLOSE_TIMEOUT_S, DEFAULT_UPSTREAM_CLOSE_TIMEOUT_S)),
    )


def _load_limits_settings() -> LimitsSettings:
    msg_window = _float_env(ENV_WS_MESSAGE_WINDOW_SECONDS, DEFAULT_WS_MESSAGE_WINDOW_SECONDS)
    if msg_window <= 0:
        msg_window = DEFAULT_WS_MESSAGE_WINDOW_SECONDS

    return LimitsSettings(
        max_concurrent_connections=max(1, _int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS)),
        ws_message_window_seconds=msg_window,
        ws_max_messages_per_window=max(0, _int_env(ENV_WS_MAX_MESSAGES_PER_WINDOW, DEFAULT_WS_MAX_MESSAGES_PER_WINDOW)),
        pending_queue_max=max(0, _int_env(ENV_RELAY_PENDING_QUEUE_MAX, DEFAULT_RELAY_PENDING_QUEUE_MAX)),
    )


def _load_websocket_settings() -> WebSocketSettings:
    return WebSocketSettings(
        idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
        watchdog_tick_s=max(0.01, _float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S)),
        max_connection_duration_s=_float_env(ENV_WS_MAX_CONNECTION_DURATION_S, DEFAULT_WS_MAX_CONNECTION_DURATION_S),
    )


def _load_audio_settings() -> AudioSettings:
    return AudioSettings(
        sample_rate_hz=AUDIO_SAMPLE_RATE_HZ,
        voice=_str_env(ENV_REALTIME_VOICE, DEFAULT_REALTIME_VOICE),
        instructions=_str_env(ENV_REALTIME_INSTRUCTIONS, DEFAULT_REALTIME_INSTRUCTIONS),
        vad_threshold=_float_env(ENV_VAD_THRESHOLD, DEFAULT_VAD_THRESHOLD),
        vad_prefix_padding_ms=_int_env(ENV_VAD_PREFIX_PADDING_MS, DEFAULT_VAD_PREFIX_PADDING_MS),
        vad_silence_duration_ms=_int_env(ENV_VAD_SILENCE_DURATION_MS, DEFAULT_VAD_SILENCE_DURATION_MS),
    )


def _load_media_settings() -> MediaSettings:
    return MediaSettings(
        url=_str_env(ENV_LIVEKIT_URL, DEFAULT_LIVEKIT_URL),
        api_key=_secret_env(ENV_LIVEKIT_API_KEY),
        api_secret=_secret_env(ENV_LIVEKIT_API_SECRET),
        token_ttl_s=max(1, _int_env(ENV_LIVEKIT_TOKEN_TTL_S, DEFAULT_LIVEKIT_TOKEN_TTL_S)),
    )


def _load_tool_settings() -> ToolSettings:
    return ToolSettings(
        wikipedia_lang=_str_env(ENV_TOOLS_WIKIPEDIA_LANG, DEFAULT_TOOLS_WIKIPEDIA_LANG),
        http_timeout_s=max(0.1, _float_env(ENV_TOOLS_HTTP_TIMEOUT_S, DEFAULT_TOOLS_HTTP_TIMEOUT_S)),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        upstream=_load_upstream_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
        audio=_load_audio_settings(),
        media=_load_media_settings(),
        tools=_load_tool_settings(),
    )


__all__ = ["load_settings"]
