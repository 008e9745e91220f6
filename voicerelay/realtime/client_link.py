"""Adapter exposing a Starlette/FastAPI WebSocket as a relay link."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from .events import RawMessage

logger = logging.getLogger(__name__)


class StarletteClientLink:
    """Client-facing side of a Session Channel.

    Text frames stay text and binary frames stay binary; nothing is re-encoded.
    """

    def __init__(
        self,
        ws: WebSocket,
        *,
        touch: Callable[[], None] | None = None,
    ) -> None:
        self._ws = ws
        self._touch = touch

    @property
    def connected(self) -> bool:
        return (
            self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        )

    async def send(self, message: RawMessage) -> None:
        if self._touch is not None:
            self._touch()
        if isinstance(message, bytes):
            await self._ws.send_bytes(message)
        else:
            await self._ws.send_text(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if not self.connected:
            return
        try:
            await self._ws.close(code=code, reason=reason)
        except (WebSocketDisconnect, RuntimeError):
            logger.debug("client socket already closed", exc_info=True)


__all__ = ["StarletteClientLink"]
