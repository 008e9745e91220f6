"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from fastapi import WebSocket

from voicerelay.state import RuntimeDeps
from voicerelay.errors import UpstreamUnreachable
from voicerelay.state.settings import UpstreamSettings
from voicerelay.handlers.limits import SlidingWindowRateLimiter
from voicerelay.realtime import SessionChannel, StarletteClientLink
from voicerelay.config.websocket import (
    WS_QUERY_MODEL,
    WS_CLOSE_BUSY_CODE,
    WS_CLOSE_INTERNAL_CODE,
    WS_ERROR_UNSUPPORTED_MODEL,
    WS_ERROR_SERVER_AT_CAPACITY,
    WS_ERROR_UPSTREAM_UNREACHABLE,
    WS_CLOSE_UNSUPPORTED_MODEL_CODE,
    WS_CLOSE_UPSTREAM_UNREACHABLE_REASON,
)

from .relay_loop import run_relay
from .lifecycle import WebSocketLifecycle
from .errors import send_error, reject_connection

logger = logging.getLogger(__name__)


def resolve_model(ws: WebSocket, settings: UpstreamSettings) -> str | None:
    """Model from `?model=`, falling back to the default. None if the allow-list rejects it."""
    requested = (ws.query_params.get(WS_QUERY_MODEL) or "").strip()
    model = requested or settings.default_model
    if settings.allowed_models and model not in settings.allowed_models:
        return None
    return model


def _create_rate_limiter(runtime_deps: RuntimeDeps) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        limit=runtime_deps.settings.limits.ws_max_messages_per_window,
        window_seconds=runtime_deps.settings.limits.ws_message_window_seconds,
    )


async def _open_channel(
    ws: WebSocket,
    link: StarletteClientLink,
    runtime_deps: RuntimeDeps,
    *,
    model: str,
    connection_id: int,
) -> SessionChannel | None:
    try:
        return await SessionChannel.open(
            link,
            runtime_deps.connector,
            model=model,
            connection_id=connection_id,
            pending_queue_max=runtime_deps.settings.limits.pending_queue_max,
        )
    except UpstreamUnreachable as exc:
        logger.warning("connection_id=%s %s", connection_id, exc)
        await send_error(
            ws,
            error_code=WS_ERROR_UPSTREAM_UNREACHABLE,
            message=WS_CLOSE_UPSTREAM_UNREACHABLE_REASON,
            details={"model": model},
        )
        await link.close(code=WS_CLOSE_INTERNAL_CODE, reason=WS_CLOSE_UPSTREAM_UNREACHABLE_REASON)
        return None


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    settings = runtime_deps.settings
    connection_id = await runtime_deps.connections.connect()
    if connection_id is None:
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return

    lifecycle: WebSocketLifecycle | None = None
    channel: SessionChannel | None = None

    async def _expire(code: int, reason: str) -> None:
        if channel is not None:
            await channel.close(code=code, reason=reason)
            return
        with contextlib.suppress(Exception):
            await ws.close(code=code, reason=reason)

    try:
        model = resolve_model(ws, settings.upstream)
        if model is None:
            await reject_connection(
                ws,
                error_code=WS_ERROR_UNSUPPORTED_MODEL,
                message="unsupported model",
                close_code=WS_CLOSE_UNSUPPORTED_MODEL_CODE,
            )
            return

        await ws.accept()
        logger.info(
            "connection_id=%s client connected model=%s. Active: %s",
            connection_id,
            model,
            runtime_deps.connections.get_connection_count(),
        )

        lifecycle = WebSocketLifecycle(_expire, settings.websocket, connection_id=connection_id)
        link = StarletteClientLink(ws, touch=lifecycle.touch)
        channel = await _open_channel(ws, link, runtime_deps, model=model, connection_id=connection_id)
        if channel is None:
            return

        lifecycle.start()
        await run_relay(
            ws,
            channel,
            lifecycle,
            _create_rate_limiter(runtime_deps),
            receive_timeout_s=settings.websocket.watchdog_tick_s * 2,
        )
    finally:
        if lifecycle is not None:
            with contextlib.suppress(Exception):
                await lifecycle.stop()
        if channel is not None:
            await channel.close()

        # The slot is released before the upstream close handshake finishes.
        with contextlib.suppress(Exception):
            await runtime_deps.connections.disconnect(connection_id)
        logger.info(
            "connection_id=%s connection closed reason=%r. Active: %s",
            connection_id,
            channel.close_reason if channel is not None else None,
            runtime_deps.connections.get_connection_count(),
        )

        if channel is not None:
            try:
                await asyncio.wait_for(channel.wait_closed(), timeout=settings.upstream.close_timeout_s)
            except TimeoutError:
                logger.warning("connection_id=%s upstream close did not finish; abandoning it", connection_id)
            except Exception:
                logger.debug("connection_id=%s upstream close failed", connection_id, exc_info=True)


__all__ = ["handle_websocket_connection", "resolve_model"]
