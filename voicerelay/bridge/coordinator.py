"""Audio Bridge: couples a media participant to a Session Channel."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable

import orjson

from voicerelay.realtime import SessionChannel
from voicerelay.tools import ToolDispatcher
from voicerelay.state.settings import AudioSettings
from voicerelay.config.audio import AUDIO_FORMAT
from voicerelay.errors import ToolError, AudioFormatError, MalformedEnvelope
from voicerelay.audio import AudioFrame, PlaybackQueue, decode_pcm16, pcm16_from_bytes, to_transport_text, from_transport_text
from voicerelay.realtime.events import (
    ERROR,
    SPEECH_STARTED,
    SPEECH_STOPPED,
    RESPONSE_AUDIO_DONE,
    RESPONSE_AUDIO_DELTA,
    CONVERSATION_ITEM_CREATED,
    RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE,
    AudioDelta,
    ErrorEvent,
    UpstreamEvent,
    FunctionCallArgumentsDone,
    ConversationItemCreated,
    encode_event,
    build_user_text,
    build_audio_append,
    build_response_create,
    build_session_update,
    build_function_call_output,
)

from .phase import BridgePhase
from .participant import ParticipantLeft, MediaParticipant, ParticipantEvent, ParticipantJoined, AudioFrameReceived

logger = logging.getLogger(__name__)

PhaseHandler = Callable[[BridgePhase], None]
TranscriptHandler = Callable[[str, str], None]


class AudioBridge:
    """Per-session coordinator between a media participant and a Session Channel.

    Outbound envelopes (audio appends, session config, tool results) go through
    one queue drained by a single sender task, so they reach the channel in the
    order they were produced. Synthesized audio is played through a
    `PlaybackQueue`. Tool calls run as tasks and always answer with exactly one
    `function_call_output` item followed by one `response.create`.
    """

    def __init__(
        self,
        *,
        channel: SessionChannel,
        participant: MediaParticipant,
        dispatcher: ToolDispatcher,
        audio: AudioSettings,
    ) -> None:
        self._channel = channel
        self._participant = participant
        self._dispatcher = dispatcher
        self._audio = audio

        self._phase = BridgePhase.IDLE
        self._phase_handlers: list[PhaseHandler] = []
        self._transcript_handlers: list[TranscriptHandler] = []
        self._unsubscribers: list[Callable[[], None]] = []

        self._playback = PlaybackQueue(participant.play_audio)
        self._outbound: asyncio.Queue[str] = asyncio.Queue()
        self._sender: asyncio.Task | None = None
        self._tool_tasks: set[asyncio.Task] = set()

        self._event_handlers: dict[str, Callable[[Any], None]] = {
            SPEECH_STARTED: self._on_speech_started,
            SPEECH_STOPPED: self._on_speech_stopped,
            RESPONSE_AUDIO_DELTA: self._on_audio_delta,
            RESPONSE_AUDIO_DONE: self._on_audio_done,
            RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE: self._on_function_call,
            CONVERSATION_ITEM_CREATED: self._on_item_created,
            ERROR: self._on_error,
        }

        self.frames_sent: int = 0
        self.deltas_enqueued: int = 0
        self.tool_calls: int = 0

    @property
    def phase(self) -> BridgePhase:
        return self._phase

    @property
    def playback(self) -> PlaybackQueue:
        return self._playback

    async def start(self, *, configure: bool = True) -> None:
        self._unsubscribers.append(self._participant.subscribe(self._on_participant_event))
        self._unsubscribers.append(self._channel.subscribe(self._on_upstream_event))
        self._playback.start()
        if self._sender is None:
            self._sender = asyncio.create_task(self._drain_outbound())
        if configure:
            self.configure_session()
        logger.info("connection_id=%s audio bridge started", self._channel.connection_id)

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

        # In-flight tool calls finish; the channel drops their sends if it is closed.
        if self._tool_tasks:
            await asyncio.gather(*self._tool_tasks, return_exceptions=True)

        if self._sender is not None:
            await self._outbound.join()
            self._sender.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sender
            self._sender = None

        await self._playback.stop()
        logger.info(
            "connection_id=%s audio bridge stopped frames_sent=%d deltas=%d tool_calls=%d",
            self._channel.connection_id,
            self.frames_sent,
            self.deltas_enqueued,
            self.tool_calls,
        )

    def subscribe_phase(self, handler: PhaseHandler) -> Callable[[], None]:
        self._phase_handlers.append(handler)
        return lambda: _discard(self._phase_handlers, handler)

    def subscribe_transcripts(self, handler: TranscriptHandler) -> Callable[[], None]:
        """`handler(role, text)` for each transcript found on created conversation items."""
        self._transcript_handlers.append(handler)
        return lambda: _discard(self._transcript_handlers, handler)

    def configure_session(self) -> None:
        self._submit(
            build_session_update(
                voice=self._audio.voice,
                instructions=self._audio.instructions,
                tools=self._dispatcher.definitions(),
                vad_threshold=self._audio.vad_threshold,
                vad_prefix_padding_ms=self._audio.vad_prefix_padding_ms,
                vad_silence_duration_ms=self._audio.vad_silence_duration_ms,
                audio_format=AUDIO_FORMAT,
            )
        )

    def send_greeting(self, text: str) -> None:
        self._submit(build_user_text(text), build_response_create())

    def push_audio(self, frame: AudioFrame) -> None:
        """Wrap a captured frame in an `input_audio_buffer.append` envelope."""
        if frame.sample_rate_hz != self._audio.sample_rate_hz:
            raise AudioFormatError(
                expected_sample_rate_hz=self._audio.sample_rate_hz,
                actual_sample_rate_hz=frame.sample_rate_hz,
            )
        self._submit(build_audio_append(to_transport_text(frame.pcm16_bytes())))
        self.frames_sent += 1

    async def resolve_tool_call(self, call: FunctionCallArgumentsDone) -> dict[str, Any]:
        """Run a tool call; every failure becomes an `{"error": ...}` payload."""
        try:
            args = orjson.loads(call.arguments) if call.arguments.strip() else {}
        except orjson.JSONDecodeError as exc:
            logger.warning("tool %s call_id=%s: unparseable arguments", call.name, call.call_id)
            return {"error": f"invalid arguments: {exc}"}
        if not isinstance(args, dict):
            return {"error": "invalid arguments: expected a JSON object"}

        try:
            return await self._dispatcher.execute(call.name, args)
        except ToolError as exc:
            logger.warning("tool %s call_id=%s failed: %s", call.name, call.call_id, exc)
            return {"error": str(exc)}
        except Exception as exc:
            logger.exception("tool %s call_id=%s raised", call.name, call.call_id)
            return {"error": str(exc) or type(exc).__name__}

    def _submit(self, *events: dict[str, Any]) -> None:
        for event in events:
            self._outbound.put_nowait(encode_event(event))

    async def _drain_outbound(self) -> None:
        while True:
            message = await self._outbound.get()
            try:
                await self._channel.forward_client_message(message)
            except Exception:
                logger.exception("connection_id=%s outbound forward failed", self._channel.connection_id)
            finally:
                self._outbound.task_done()

    def _set_phase(self, phase: BridgePhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        for handler in list(self._phase_handlers):
            try:
                handler(phase)
            except Exception:
                logger.exception("phase handler failed")

    def _on_participant_event(self, event: ParticipantEvent) -> None:
        if isinstance(event, AudioFrameReceived):
            self.push_audio(event.frame)
        elif isinstance(event, ParticipantJoined):
            logger.info("connection_id=%s participant joined: %s", self._channel.connection_id, event.identity)
        elif isinstance(event, ParticipantLeft):
            logger.info("connection_id=%s participant left: %s", self._channel.connection_id, event.identity)

    def _on_upstream_event(self, event: UpstreamEvent) -> None:
        handler = self._event_handlers.get(event.type)
        if handler is not None:
            handler(event)

    def _on_speech_started(self, _event: Any) -> None:
        self._set_phase(BridgePhase.LISTENING)

    def _on_speech_stopped(self, _event: Any) -> None:
        self._set_phase(BridgePhase.PROCESSING)

    def _on_audio_done(self, _event: Any) -> None:
        self._set_phase(BridgePhase.IDLE)

    def _on_audio_delta(self, event: AudioDelta) -> None:
        try:
            pcm = pcm16_from_bytes(from_transport_text(event.delta))
        except MalformedEnvelope as exc:
            logger.warning("connection_id=%s skipping undecodable audio delta: %s", self._channel.connection_id, exc)
            return
        self._playback.enqueue(AudioFrame(samples=decode_pcm16(pcm), sample_rate_hz=self._audio.sample_rate_hz))
        self.deltas_enqueued += 1

    def _on_function_call(self, event: FunctionCallArgumentsDone) -> None:
        self.tool_calls += 1
        task = asyncio.create_task(self._complete_tool_call(event))
        self._tool_tasks.add(task)
        task.add_done_callback(self._tool_tasks.discard)

    async def _complete_tool_call(self, call: FunctionCallArgumentsDone) -> None:
        # Every call is answered with one output item and one response.create, whatever happens.
        try:
            output = await self.resolve_tool_call(call)
            item = build_function_call_output(call.call_id, output)
        except TypeError as exc:
            # orjson.JSONEncodeError subclasses TypeError.
            logger.warning("tool %s call_id=%s returned an unserializable result: %s", call.name, call.call_id, exc)
            item = build_function_call_output(call.call_id, {"error": f"tool result is not JSON serializable: {exc}"})
        except Exception as exc:
            logger.exception("tool %s call_id=%s could not be completed", call.name, call.call_id)
            item = build_function_call_output(call.call_id, {"error": str(exc) or type(exc).__name__})
        self._submit(item, build_response_create())

    def _on_item_created(self, event: ConversationItemCreated) -> None:
        if not event.transcripts:
            return
        role = event.item.get("role")
        role = role if isinstance(role, str) else ""
        for text in event.transcripts:
            for handler in list(self._transcript_handlers):
                try:
                    handler(role, text)
                except Exception:
                    logger.exception("transcript handler failed")

    def _on_error(self, event: ErrorEvent) -> None:
        logger.warning("connection_id=%s upstream reported error: %s", self._channel.connection_id, event.message)


def _discard(handlers: list, handler: Any) -> None:
    with contextlib.suppress(ValueError):
        handlers.remove(handler)


__all__ = ["AudioBridge", "PhaseHandler", "TranscriptHandler"]
