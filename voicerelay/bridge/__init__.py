from .phase import BridgePhase
from .coordinator import AudioBridge
from .session import run_bridge_session
from .participant import (
    ParticipantLeft,
    MediaParticipant,
    ParticipantEvent,
    ParticipantJoined,
    AudioFrameReceived,
)

__all__ = [
    "AudioBridge",
    "AudioFrameReceived",
    "BridgePhase",
    "MediaParticipant",
    "ParticipantEvent",
    "ParticipantJoined",
    "ParticipantLeft",
    "run_bridge_session",
]
