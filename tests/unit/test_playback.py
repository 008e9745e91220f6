from __future__ import annotations

import asyncio

import numpy as np
import pytest

from voicerelay.audio import AudioFrame
from voicerelay.audio.playback import PlaybackQueue


def _frame(value: int) -> AudioFrame:
    return AudioFrame(samples=np.full(4, value, dtype=np.int16))


@pytest.mark.asyncio
async def test_frames_play_in_arrival_order_without_overlap() -> None:
    played: list[int] = []
    active = 0

    async def play(frame: AudioFrame) -> None:
        nonlocal active
        active += 1
        assert active == 1
        await asyncio.sleep(0.001)
        played.append(int(frame.samples[0]))
        active -= 1

    queue = PlaybackQueue(play)
    queue.start()
    for i in range(10):
        queue.enqueue(_frame(i))
    await asyncio.wait_for(queue.join(), timeout=1.0)

    assert played == list(range(10))
    assert queue.frames_played == 10
    await queue.stop()


@pytest.mark.asyncio
async def test_failed_frame_does_not_stop_playback() -> None:
    played: list[int] = []

    async def play(frame: AudioFrame) -> None:
        value = int(frame.samples[0])
        if value == 1:
            raise RuntimeError("device busy")
        played.append(value)

    queue = PlaybackQueue(play)
    queue.start()
    for i in range(3):
        queue.enqueue(_frame(i))
    await asyncio.wait_for(queue.join(), timeout=1.0)

    assert played == [0, 2]
    assert queue.frames_played == 2
    await queue.stop()


@pytest.mark.asyncio
async def test_clear_drops_pending_frames() -> None:
    queue = PlaybackQueue(lambda frame: asyncio.sleep(0))
    for i in range(4):
        queue.enqueue(_frame(i))
    assert queue.pending() == 4
    assert queue.clear() == 4
    assert queue.pending() == 0
    await queue.stop()
