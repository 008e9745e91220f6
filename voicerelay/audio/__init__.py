from .frame import AudioFrame
from .playback import PlaybackQueue
from .codec import (
    decode_pcm16,
    encode_pcm16,
    pcm16_to_bytes,
    pcm16_from_bytes,
    to_transport_text,
    from_transport_text,
)

__all__ = [
    "AudioFrame",
    "PlaybackQueue",
    "decode_pcm16",
    "encode_pcm16",
    "from_transport_text",
    "pcm16_from_bytes",
    "pcm16_to_bytes",
    "to_transport_text",
]
