"""Client pump and task pairing for one relay session."""

from __future__ import annotations

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from voicerelay.errors import MalformedEnvelope
from voicerelay.realtime import SessionChannel
from voicerelay.realtime.events import RawMessage, decode_object
from voicerelay.handlers.limits import SlidingWindowRateLimiter
from voicerelay.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_CLIENT_GONE_REASON,
    WS_ERROR_MALFORMED_ENVELOPE,
)

from .errors import send_error
from .limits import consume_limiter
from .lifecycle import WebSocketLifecycle

logger = logging.getLogger(__name__)


def _frame_payload(message: dict) -> RawMessage | None:
    text = message.get("text")
    if text is not None:
        return text
    return message.get("bytes")


async def _recv_with_watchdog(
    ws: WebSocket,
    lifecycle: WebSocketLifecycle,
    timeout_s: float,
) -> tuple[dict | None, bool]:
    try:
        message = await asyncio.wait_for(ws.receive(), timeout=timeout_s)
        return message, False
    except TimeoutError:
        return None, lifecycle.should_close()


async def run_client_pump(
    ws: WebSocket,
    channel: SessionChannel,
    lifecycle: WebSocketLifecycle,
    limiter: SlidingWindowRateLimiter,
    *,
    receive_timeout_s: float,
) -> None:
    """Forward client frames into the channel until the client goes away."""
    connection_id = channel.connection_id
    try:
        while not channel.closed:
            message, should_exit = await _recv_with_watchdog(ws, lifecycle, receive_timeout_s)
            if should_exit:
                return
            if message is None:
                continue
            if message.get("type") == "websocket.disconnect":
                logger.info("connection_id=%s client disconnected code=%s", connection_id, message.get("code"))
                return

            raw = _frame_payload(message)
            if raw is None:
                continue
            lifecycle.touch()

            if not await consume_limiter(ws, limiter, connection_id=connection_id):
                continue

            try:
                decode_object(raw)
            except MalformedEnvelope as exc:
                logger.warning("connection_id=%s dropping malformed client message: %s", connection_id, exc)
                await send_error(ws, error_code=WS_ERROR_MALFORMED_ENVELOPE, message=str(exc))
                continue

            await channel.forward_client_message(raw)
    except WebSocketDisconnect:
        logger.info("connection_id=%s client disconnected", connection_id)


async def run_relay(
    ws: WebSocket,
    channel: SessionChannel,
    lifecycle: WebSocketLifecycle,
    limiter: SlidingWindowRateLimiter,
    *,
    receive_timeout_s: float,
) -> None:
    """Run the client pump and the upstream reader; whichever ends first ends the session."""
    connection_id = channel.connection_id
    pump = asyncio.create_task(
        run_client_pump(ws, channel, lifecycle, limiter, receive_timeout_s=receive_timeout_s),
        name=f"relay-client-{connection_id}",
    )
    reader = asyncio.create_task(channel.run(), name=f"relay-upstream-{connection_id}")
    tasks = (pump, reader)
    try:
        done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        if pump in done:
            await channel.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_CLIENT_GONE_REASON)
    finally:
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for task, result in zip(tasks, results):
            if isinstance(result, Exception):
                logger.error("connection_id=%s %s failed", connection_id, task.get_name(), exc_info=result)


__all__ = ["run_client_pump", "run_relay"]
