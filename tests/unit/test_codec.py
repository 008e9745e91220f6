from __future__ import annotations

import numpy as np
import pytest

from voicerelay.errors import MalformedEnvelope
from voicerelay.audio import (
    AudioFrame,
    decode_pcm16,
    encode_pcm16,
    pcm16_to_bytes,
    pcm16_from_bytes,
    to_transport_text,
    from_transport_text,
)

STEP = 1.0 / 32767.0


def test_encode_pcm16_uses_asymmetric_scale() -> None:
    out = encode_pcm16([1.0, -1.0, 0.0, 0.5, -0.5])
    assert out.dtype == np.int16
    assert out.tolist() == [32767, -32768, 0, 16383, -16384]


def test_encode_pcm16_clamps_out_of_range() -> None:
    assert encode_pcm16([3.0, -7.5]).tolist() == [32767, -32768]


def test_decode_inverts_encode_within_one_step() -> None:
    rng = np.random.default_rng(1234)
    samples = rng.uniform(-1.0, 1.0, size=4096).astype(np.float32)
    restored = decode_pcm16(encode_pcm16(samples))
    assert restored.dtype == np.float32
    assert np.max(np.abs(restored - samples)) <= STEP


def test_decode_pcm16_extremes() -> None:
    assert decode_pcm16(np.array([32767, -32768], dtype=np.int16)).tolist() == [1.0, -1.0]


def test_transport_text_round_trip_is_exact() -> None:
    data = bytes(range(256)) * 3
    assert from_transport_text(to_transport_text(data)) == data
    assert from_transport_text(to_transport_text(b"")) == b""


def test_from_transport_text_rejects_invalid_base64() -> None:
    with pytest.raises(MalformedEnvelope):
        from_transport_text("not*base64!")


def test_pcm16_bytes_are_little_endian() -> None:
    raw = pcm16_to_bytes(np.array([1, -2], dtype=np.int16))
    assert raw == b"\x01\x00\xfe\xff"
    assert pcm16_from_bytes(raw).tolist() == [1, -2]


def test_pcm16_from_bytes_rejects_odd_length() -> None:
    with pytest.raises(MalformedEnvelope):
        pcm16_from_bytes(b"\x00\x01\x02")


def test_audio_frame_encodes_float_samples() -> None:
    frame = AudioFrame(samples=np.array([0.0, 1.0, -1.0], dtype=np.float32))
    assert frame.sample_rate_hz == 24000
    assert frame.pcm16().tolist() == [0, 32767, -32768]
    assert len(frame.pcm16_bytes()) == 6
    assert frame.duration_s == pytest.approx(3 / 24000)
