"""Audio state of a bridged voice session."""

from __future__ import annotations

from enum import Enum


class BridgePhase(str, Enum):
    IDLE = "idle"  # nothing in flight
    LISTENING = "listening"  # upstream VAD saw speech start
    PROCESSING = "processing"  # speech stopped, awaiting synthesized audio


__all__ = ["BridgePhase"]
