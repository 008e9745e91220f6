"""Audio frame value type."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from voicerelay.config.audio import AUDIO_CHANNELS, AUDIO_SAMPLE_RATE_HZ

from .codec import encode_pcm16, pcm16_to_bytes


@dataclass(frozen=True, slots=True)
class AudioFrame:
    """One quantum of mono audio.

    `samples` is either int16 PCM or float32 normalized to [-1, 1].
    """

    samples: np.ndarray
    sample_rate_hz: int = AUDIO_SAMPLE_RATE_HZ
    channels: int = AUDIO_CHANNELS

    @property
    def duration_s(self) -> float:
        return float(len(self.samples)) / float(self.sample_rate_hz)

    def pcm16(self) -> np.ndarray:
        if self.samples.dtype == np.int16:
            return self.samples
        return encode_pcm16(self.samples)

    def pcm16_bytes(self) -> bytes:
        return pcm16_to_bytes(self.pcm16())


__all__ = ["AudioFrame"]
