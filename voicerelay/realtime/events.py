"""Realtime event envelopes.

Upstream events are parsed into one frozen dataclass per recognized `type`;
anything else becomes `UnknownEvent`. Client-origin events are built as plain
dicts and serialized with orjson.
"""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass

import orjson

from voicerelay.errors import MalformedEnvelope
from voicerelay.config.websocket import WS_KEY_TYPE

SESSION_UPDATE = "session.update"
SESSION_CREATED = "session.created"
SESSION_UPDATED = "session.updated"
INPUT_AUDIO_APPEND = "input_audio_buffer.append"
SPEECH_STARTED = "input_audio_buffer.speech_started"
SPEECH_STOPPED = "input_audio_buffer.speech_stopped"
CONVERSATION_ITEM_CREATE = "conversation.item.create"
CONVERSATION_ITEM_CREATED = "conversation.item.created"
RESPONSE_CREATE = "response.create"
RESPONSE_AUDIO_DELTA = "response.audio.delta"
RESPONSE_AUDIO_DONE = "response.audio.done"
RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE = "response.function_call_arguments.done"
RESPONSE_DONE = "response.done"
ERROR = "error"

SESSION_READY_TYPES = frozenset({SESSION_CREATED, SESSION_UPDATED})

RawMessage = str | bytes


@dataclass(frozen=True, slots=True)
class SessionCreated:
    session: dict[str, Any]
    type: str = SESSION_CREATED


@dataclass(frozen=True, slots=True)
class SessionUpdated:
    session: dict[str, Any]
    type: str = SESSION_UPDATED


@dataclass(frozen=True, slots=True)
class SpeechStarted:
    audio_start_ms: int | None = None
    item_id: str | None = None
    type: str = SPEECH_STARTED


@dataclass(frozen=True, slots=True)
class SpeechStopped:
    audio_end_ms: int | None = None
    item_id: str | None = None
    type: str = SPEECH_STOPPED


@dataclass(frozen=True, slots=True)
class AudioDelta:
    delta: str
    response_id: str | None = None
    item_id: str | None = None
    type: str = RESPONSE_AUDIO_DELTA


@dataclass(frozen=True, slots=True)
class AudioDone:
    response_id: str | None = None
    item_id: str | None = None
    type: str = RESPONSE_AUDIO_DONE


@dataclass(frozen=True, slots=True)
class FunctionCallArgumentsDone:
    call_id: str
    name: str
    arguments: str
    type: str = RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE


@dataclass(frozen=True, slots=True)
class ConversationItemCreated:
    item: dict[str, Any]
    transcripts: tuple[str, ...] = ()
    type: str = CONVERSATION_ITEM_CREATED


@dataclass(frozen=True, slots=True)
class ResponseDone:
    response: dict[str, Any]
    type: str = RESPONSE_DONE


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    error: dict[str, Any]
    type: str = ERROR

    @property
    def message(self) -> str:
        msg = self.error.get("message")
        return msg if isinstance(msg, str) else ""

    @property
    def code(self) -> str | None:
        code = self.error.get("code")
        return code if isinstance(code, str) else None


@dataclass(frozen=True, slots=True)
class UnknownEvent:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


UpstreamEvent = (
    SessionCreated
    | SessionUpdated
    | SpeechStarted
    | SpeechStopped
    | AudioDelta
    | AudioDone
    | FunctionCallArgumentsDone
    | ConversationItemCreated
    | ResponseDone
    | ErrorEvent
    | UnknownEvent
)


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _opt_int(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _require_str(event: dict[str, Any], key: str) -> str:
    value = event.get(key)
    if not isinstance(value, str):
        raise MalformedEnvelope(f"'{event.get(WS_KEY_TYPE)}' event missing string '{key}'")
    return value


def _transcripts(item: dict[str, Any]) -> tuple[str, ...]:
    content = item.get("content")
    if not isinstance(content, list):
        return ()
    return tuple(c["transcript"] for c in content if isinstance(c, dict) and isinstance(c.get("transcript"), str))


def decode_object(raw: RawMessage) -> dict[str, Any]:
    """Parse a raw frame into a JSON object with a non-empty string `type`."""
    try:
        obj = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise MalformedEnvelope(f"invalid JSON: {exc}") from exc

    if not isinstance(obj, dict):
        raise MalformedEnvelope("message must be a JSON object")

    msg_type = obj.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise MalformedEnvelope("message missing non-empty 'type'")
    return obj


def parse_upstream_event(raw: RawMessage) -> UpstreamEvent:
    obj = decode_object(raw)
    msg_type = obj[WS_KEY_TYPE]

    if msg_type == SESSION_CREATED:
        return SessionCreated(session=_dict(obj.get("session")))
    if msg_type == SESSION_UPDATED:
        return SessionUpdated(session=_dict(obj.get("session")))
    if msg_type == SPEECH_STARTED:
        return SpeechStarted(audio_start_ms=_opt_int(obj.get("audio_start_ms")), item_id=_opt_str(obj.get("item_id")))
    if msg_type == SPEECH_STOPPED:
        return SpeechStopped(audio_end_ms=_opt_int(obj.get("audio_end_ms")), item_id=_opt_str(obj.get("item_id")))
    if msg_type == RESPONSE_AUDIO_DELTA:
        return AudioDelta(
            delta=_require_str(obj, "delta"),
            response_id=_opt_str(obj.get("response_id")),
            item_id=_opt_str(obj.get("item_id")),
        )
    if msg_type == RESPONSE_AUDIO_DONE:
        return AudioDone(response_id=_opt_str(obj.get("response_id")), item_id=_opt_str(obj.get("item_id")))
    if msg_type == RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE:
        return FunctionCallArgumentsDone(
            call_id=_require_str(obj, "call_id"),
            name=_require_str(obj, "name"),
            arguments=_require_str(obj, "arguments"),
        )
    if msg_type == CONVERSATION_ITEM_CREATED:
        item = _dict(obj.get("item"))
        return ConversationItemCreated(item=item, transcripts=_transcripts(item))
    if msg_type == RESPONSE_DONE:
        return ResponseDone(response=_dict(obj.get("response")))
    if msg_type == ERROR:
        return ErrorEvent(error=_dict(obj.get("error")))

    payload = {k: v for k, v in obj.items() if k != WS_KEY_TYPE}
    return UnknownEvent(type=msg_type, payload=payload)


def encode_event(event: dict[str, Any]) -> str:
    return orjson.dumps(event).decode("utf-8")


def build_session_update(
    *,
    voice: str,
    instructions: str,
    tools: list[dict[str, Any]] | None = None,
    vad_threshold: float = 0.5,
    vad_prefix_padding_ms: int = 300,
    vad_silence_duration_ms: int = 500,
    audio_format: str = "pcm16",
) -> dict[str, Any]:
    session: dict[str, Any] = {
        "modalities": ["text", "audio"],
        "voice": voice,
        "instructions": instructions,
        "input_audio_format": audio_format,
        "output_audio_format": audio_format,
        "turn_detection": {
            "type": "server_vad",
            "threshold": vad_threshold,
            "prefix_padding_ms": vad_prefix_padding_ms,
            "silence_duration_ms": vad_silence_duration_ms,
        },
    }
    if tools:
        session["tools"] = tools
        session["tool_choice"] = "auto"
    return {WS_KEY_TYPE: SESSION_UPDATE, "session": session}


def build_audio_append(audio_b64: str) -> dict[str, Any]:
    return {WS_KEY_TYPE: INPUT_AUDIO_APPEND, "audio": audio_b64}


def build_function_call_output(call_id: str, output: dict[str, Any]) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: CONVERSATION_ITEM_CREATE,
        "item": {
            "type": "function_call_output",
            "call_id": call_id,
            "output": orjson.dumps(output).decode("utf-8"),
        },
    }


def build_user_text(text: str) -> dict[str, Any]:
    return {
        WS_KEY_TYPE: CONVERSATION_ITEM_CREATE,
        "item": {
            "type": "message",
            "role": "user",
            "content": [{"type": "input_text", "text": text}],
        },
    }


def build_response_create() -> dict[str, Any]:
    return {WS_KEY_TYPE: RESPONSE_CREATE}


__all__ = [
    "AudioDelta",
    "AudioDone",
    "ConversationItemCreated",
    "ErrorEvent",
    "FunctionCallArgumentsDone",
    "RawMessage",
    "ResponseDone",
    "SESSION_READY_TYPES",
    "SessionCreated",
    "SessionUpdated",
    "SpeechStarted",
    "SpeechStopped",
    "UnknownEvent",
    "UpstreamEvent",
    "build_audio_append",
    "build_function_call_output",
    "build_response_create",
    "build_session_update",
    "build_user_text",
    "decode_object",
    "encode_event",
    "parse_upstream_event",
]
