from __future__ import annotations

import asyncio

import pytest

from voicerelay.state.settings import WebSocketSettings
from voicerelay.handlers.websocket.lifecycle import WebSocketLifecycle
from voicerelay.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    WS_CLOSE_MAX_DURATION_CODE,
    WS_CLOSE_MAX_DURATION_REASON,
)


class _Closer:
    def __init__(self) -> None:
        self.closed = asyncio.Event()
        self.code: int | None = None
        self.reason: str | None = None

    async def __call__(self, code: int, reason: str) -> None:
        self.code = code
        self.reason = reason
        self.closed.set()


@pytest.mark.asyncio
async def test_websocket_lifecycle_closes_on_max_duration() -> None:
    closer = _Closer()
    lifecycle = WebSocketLifecycle(
        closer,
        WebSocketSettings(idle_timeout_s=9999.0, watchdog_tick_s=0.01, max_connection_duration_s=0.05),
    )
    lifecycle.start()

    await asyncio.wait_for(closer.closed.wait(), timeout=1.0)
    assert closer.code == WS_CLOSE_MAX_DURATION_CODE
    assert closer.reason == WS_CLOSE_MAX_DURATION_REASON
    assert lifecycle.should_close()

    await lifecycle.stop()


@pytest.mark.asyncio
async def test_websocket_lifecycle_closes_when_idle() -> None:
    closer = _Closer()
    lifecycle = WebSocketLifecycle(
        closer,
        WebSocketSettings(idle_timeout_s=0.05, watchdog_tick_s=0.01, max_connection_duration_s=0.0),
    )
    lifecycle.start()

    await asyncio.wait_for(closer.closed.wait(), timeout=1.0)
    assert closer.code == WS_CLOSE_IDLE_CODE
    assert closer.reason == WS_CLOSE_IDLE_REASON
    assert lifecycle.expired_reason == WS_CLOSE_IDLE_REASON

    await lifecycle.stop()


@pytest.mark.asyncio
async def test_websocket_lifecycle_touch_keeps_connection_open() -> None:
    closer = _Closer()
    lifecycle = WebSocketLifecycle(
        closer,
        WebSocketSettings(idle_timeout_s=0.2, watchdog_tick_s=0.01, max_connection_duration_s=0.0),
    )
    lifecycle.start()
    for _ in range(10):
        await asyncio.sleep(0.03)
        lifecycle.touch()

    assert not closer.closed.is_set()
    await lifecycle.stop()
    assert not closer.closed.is_set()
