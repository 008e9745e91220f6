"""In-process client link used when the Audio Bridge is the channel's client."""

from __future__ import annotations

import asyncio
import logging

from .events import RawMessage

logger = logging.getLogger(__name__)


class LocalClientLink:
    """Client side of a Session Channel without a network socket.

    The bridge consumes upstream events through channel subscriptions, so
    forwarded messages are only counted here. Closing resolves `wait_closed()`.
    """

    def __init__(self) -> None:
        self._closed = asyncio.Event()
        self.received: int = 0
        self.close_code: int | None = None
        self.close_reason: str | None = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def send(self, message: RawMessage) -> None:
        if self._closed.is_set():
            raise RuntimeError("local client link is closed")
        self.received += 1

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self._closed.is_set():
            return
        self.close_code = code
        self.close_reason = reason
        self._closed.set()
        logger.debug("local client link closed code=%s reason=%r", code, reason)

    async def wait_closed(self) -> None:
        await self._closed.wait()


__all__ = ["LocalClientLink"]
