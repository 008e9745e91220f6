"""Run one bridged voice session end to end without a client socket."""

from __future__ import annotations

import logging

from voicerelay.tools import ToolDispatcher
from voicerelay.state.settings import AudioSettings
from voicerelay.realtime import SessionChannel, LocalClientLink, UpstreamConnector

from .coordinator import AudioBridge
from .participant import MediaParticipant

logger = logging.getLogger(__name__)


async def run_bridge_session(
    *,
    connector: UpstreamConnector,
    participant: MediaParticipant,
    dispatcher: ToolDispatcher,
    audio: AudioSettings,
    model: str,
    connection_id: int = 0,
    pending_queue_max: int = 0,
    greeting: str | None = None,
    configure_session: bool = True,
    publish_microphone: bool = True,
) -> SessionChannel:
    """Open a channel with a local client link and run the bridge until the upstream ends.

    Raises `UpstreamUnreachable` if the upstream socket cannot be opened. Returns the
    closed channel so callers can inspect `close_code`/`close_reason`.
    """
    channel = await SessionChannel.open(
        LocalClientLink(),
        connector,
        model=model,
        connection_id=connection_id,
        pending_queue_max=pending_queue_max,
    )
    bridge = AudioBridge(channel=channel, participant=participant, dispatcher=dispatcher, audio=audio)
    await bridge.start(configure=configure_session)
    try:
        if greeting:
            bridge.send_greeting(greeting)
        if publish_microphone:
            await participant.publish_microphone()
        await channel.run()
    finally:
        await channel.close()
        await bridge.stop()
        await channel.wait_closed()
    logger.info("connection_id=%s bridge session ended reason=%r", connection_id, channel.close_reason)
    return channel


__all__ = ["run_bridge_session"]
