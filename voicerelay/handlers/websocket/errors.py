"""Relay-originated error events for the client WebSocket.

They use the upstream `error` event shape so clients handle relay and upstream
errors the same way; `error.type` is `relay_error` for ours.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from voicerelay.config.websocket import WS_KEY_TYPE, WS_KEY_ERROR, WS_ERROR_TYPE_RELAY

logger = logging.getLogger(__name__)


def build_error_event(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: WS_KEY_ERROR,
        WS_KEY_ERROR: {
            "type": WS_ERROR_TYPE_RELAY,
            "code": code,
            "message": message,
            "details": dict(details or {}),
        },
    }


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def send_error(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> bool:
    event = build_error_event(error_code, message, details=details)
    return await safe_send_text(ws, orjson.dumps(event).decode("utf-8"))


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    # Accept first so the client receives the error event and a close reason.
    try:
        await ws.accept()
    except Exception:
        logger.debug("accept failed while rejecting connection", exc_info=True)
        return
    await send_error(ws, error_code=error_code, message=message)
    try:
        await ws.close(code=close_code, reason=message)
    except Exception:
        return


__all__ = [
    "build_error_event",
    "reject_connection",
    "safe_send_text",
    "send_error",
]
