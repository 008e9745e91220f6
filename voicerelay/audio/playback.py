"""Ordered playback of synthesized audio."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

from .frame import AudioFrame

logger = logging.getLogger(__name__)

PlayFn = Callable[[AudioFrame], Awaitable[None]]


class PlaybackQueue:
    """FIFO of frames drained by a single consumer task.

    Frames are appended at the tail and played from the head, one at a time:
    `play` is awaited to completion before the next frame starts, so chunks
    never interleave or skip.
    """

    def __init__(self, play: PlayFn) -> None:
        self._play = play
        self._queue: asyncio.Queue[AudioFrame] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self.frames_played: int = 0

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._consume())
        return self._task

    def enqueue(self, frame: AudioFrame) -> None:
        self._queue.put_nowait(frame)

    def pending(self) -> int:
        return self._queue.qsize()

    def clear(self) -> int:
        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            dropped += 1
        return dropped

    async def join(self) -> None:
        await self._queue.join()

    async def stop(self) -> None:
        self.clear()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _consume(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self._play(frame)
                self.frames_played += 1
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("audio playback failed; continuing with next frame")
            finally:
                self._queue.task_done()


__all__ = ["PlaybackQueue"]
