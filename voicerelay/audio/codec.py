"""PCM16 <-> float sample conversion and base64 transport encoding.

Pure functions. Samples are numpy arrays; little-endian int16 is the wire layout
the realtime API expects for `pcm16`.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Sequence

import numpy as np

from voicerelay.errors import MalformedEnvelope
from voicerelay.config.audio import PCM16_NEGATIVE_SCALE, PCM16_POSITIVE_SCALE

_PCM16_DTYPE = np.dtype("<i2")


def encode_pcm16(samples: Sequence[float] | np.ndarray) -> np.ndarray:
    """Clamp normalized floats to [-1, 1] and scale to int16.

    Positive values scale by 32767 and negative values by 32768 so the whole
    signed range is used without overflow.
    """
    x = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(x < 0, x * PCM16_NEGATIVE_SCALE, x * PCM16_POSITIVE_SCALE)
    # Truncate toward zero like an Int16Array assignment would.
    return np.trunc(scaled).astype(np.int16)


def decode_pcm16(samples: Sequence[int] | np.ndarray) -> np.ndarray:
    """Inverse of encode_pcm16: int16 -> float32 in [-1, 1]."""
    x = np.asarray(samples, dtype=np.int16).astype(np.float32)
    return np.where(x < 0, x / PCM16_NEGATIVE_SCALE, x / PCM16_POSITIVE_SCALE).astype(np.float32)


def pcm16_to_bytes(samples: np.ndarray) -> bytes:
    return np.asarray(samples, dtype=np.int16).astype(_PCM16_DTYPE, copy=False).tobytes()


def pcm16_from_bytes(data: bytes) -> np.ndarray:
    if len(data) % 2:
        raise MalformedEnvelope(f"pcm16 payload has odd length ({len(data)} bytes)")
    return np.frombuffer(data, dtype=_PCM16_DTYPE).astype(np.int16)


def to_transport_text(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def from_transport_text(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEnvelope(f"invalid base64 audio payload: {exc}") from exc


__all__ = [
    "decode_pcm16",
    "encode_pcm16",
    "from_transport_text",
    "pcm16_from_bytes",
    "pcm16_to_bytes",
    "to_transport_text",
]
