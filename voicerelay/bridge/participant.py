"""Media participant interface (LiveKit-style room member).

The bridge treats the participant as an opaque source of inbound audio frames
and a sink for synthesized audio; transport internals live behind it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from dataclasses import dataclass
from collections.abc import Callable

from voicerelay.audio import AudioFrame


@dataclass(frozen=True, slots=True)
class AudioFrameReceived:
    frame: AudioFrame
    participant_identity: str = ""


@dataclass(frozen=True, slots=True)
class ParticipantJoined:
    identity: str


@dataclass(frozen=True, slots=True)
class ParticipantLeft:
    identity: str


ParticipantEvent = AudioFrameReceived | ParticipantJoined | ParticipantLeft
ParticipantHandler = Callable[[ParticipantEvent], None]


@runtime_checkable
class MediaParticipant(Protocol):
    def subscribe(self, handler: ParticipantHandler) -> Callable[[], None]: ...

    async def play_audio(self, frame: AudioFrame) -> None: ...

    async def publish_microphone(self) -> None: ...


__all__ = [
    "AudioFrameReceived",
    "MediaParticipant",
    "ParticipantEvent",
    "ParticipantHandler",
    "ParticipantJoined",
    "ParticipantLeft",
]
