"""Runtime dependency construction (upstream connector, admission control, tools, tokens)."""

from __future__ import annotations

import logging

import httpx

from voicerelay.state import RuntimeDeps
from voicerelay.state.settings import AppSettings
from voicerelay.tools import build_default_dispatcher
from voicerelay.realtime.upstream import UpstreamConnector
from voicerelay.handlers.connections import ConnectionManager

from .tokens import RoomTokenIssuer
from .settings import load_settings

logger = logging.getLogger(__name__)


async def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    if not settings.upstream.api_key:
        logger.warning("OPENAI_API_KEY is not set; every relay session will fail with 'upstream unreachable'")
    if not (settings.media.api_key and settings.media.api_secret):
        logger.warning("LIVEKIT_API_KEY/LIVEKIT_API_SECRET are not set; room token issuance is disabled")

    http_client = httpx.AsyncClient(timeout=settings.tools.http_timeout_s)

    deps = RuntimeDeps(
        settings=settings,
        connections=ConnectionManager(max_connections=settings.limits.max_concurrent_connections),
        connector=UpstreamConnector(settings.upstream),
        token_issuer=RoomTokenIssuer(settings.media),
        tools=build_default_dispatcher(settings.tools, http_client=http_client),
        http_client=http_client,
    )
    logger.info(
        "runtime: upstream=%s default_model=%s max_connections=%s pending_queue_max=%s",
        settings.upstream.url,
        settings.upstream.default_model,
        settings.limits.max_concurrent_connections,
        settings.limits.pending_queue_max,
    )
    return deps


__all__ = ["RuntimeDeps", "build_runtime_deps"]
