"""Per-connection lifecycle watchdog (idle timeout and maximum duration)."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

from voicerelay.state.settings import WebSocketSettings
from voicerelay.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    WS_CLOSE_MAX_DURATION_CODE,
    WS_CLOSE_MAX_DURATION_REASON,
)

logger = logging.getLogger(__name__)

CloseFn = Callable[[int, str], Awaitable[None]]


class WebSocketLifecycle:
    """Closes a relay session that goes quiet or outlives its maximum duration.

    `touch()` is called for traffic in either direction; `close_fn(code, reason)`
    tears the whole session down, not just the client socket.
    """

    def __init__(
        self,
        close_fn: CloseFn,
        settings: WebSocketSettings,
        *,
        connection_id: int = 0,
    ) -> None:
        self._close_fn = close_fn
        self._connection_id = connection_id
        self._idle_timeout_s = float(settings.idle_timeout_s)
        self._watchdog_tick_s = max(0.001, float(settings.watchdog_tick_s))
        self._max_connection_duration_s = float(settings.max_connection_duration_s)
        self._connection_start = time.monotonic()
        self._last_activity = self._connection_start
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.expired_reason: str | None = None

    @property
    def idle_timeout_s(self) -> float:
        return self._idle_timeout_s

    def touch(self) -> None:
        self._last_activity = time.monotonic()

    def should_close(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    def _check(self) -> tuple[int, str] | None:
        now = time.monotonic()
        if self._max_connection_duration_s > 0 and now - self._connection_start >= self._max_connection_duration_s:
            return WS_CLOSE_MAX_DURATION_CODE, WS_CLOSE_MAX_DURATION_REASON
        if self._idle_timeout_s > 0 and now - self._last_activity >= self._idle_timeout_s:
            return WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON
        return None

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                verdict = self._check()
                if verdict is None:
                    continue
                code, reason = verdict
                logger.info("connection_id=%s %s; closing connection", self._connection_id, reason)
                self.expired_reason = reason
                self._stop_event.set()
                await self._close_fn(code, reason)
                break
        except asyncio.CancelledError:
            return
        except Exception:
            logger.exception("connection_id=%s lifecycle watchdog failed", self._connection_id)


__all__ = ["WebSocketLifecycle"]
