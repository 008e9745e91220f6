"""HTTP handler for room token issuance."""

from __future__ import annotations

import time
import logging
import secrets

from fastapi import HTTPException
from pydantic import Field, BaseModel, ConfigDict

from voicerelay.state import RuntimeDeps
from voicerelay.errors import TokenIssueError
from voicerelay.config.media import LIVEKIT_ROOM_PREFIX

logger = logging.getLogger(__name__)


class TokenRequest(BaseModel):
    """Body of `POST /api/livekit/token`; camelCase field names are accepted too."""

    model_config = ConfigDict(populate_by_name=True)

    room_name: str | None = Field(default=None, alias="roomName")
    participant_name: str | None = Field(default=None, alias="participantName")


def generate_room_name(now: float | None = None) -> str:
    epoch = int(time.time() if now is None else now)
    return f"{LIVEKIT_ROOM_PREFIX}-{epoch}-{secrets.token_hex(4)}"


def issue_room_token(body: TokenRequest, runtime_deps: RuntimeDeps) -> dict[str, str]:
    participant = (body.participant_name or "").strip()
    if not participant:
        raise HTTPException(status_code=400, detail="participant_name is required")
    room = (body.room_name or "").strip() or generate_room_name()

    try:
        token = runtime_deps.token_issuer.issue(room, participant)
    except TokenIssueError as exc:
        logger.error("room token issuance failed room=%s identity=%s: %s", room, participant, exc)
        raise HTTPException(status_code=500, detail=f"Failed to generate token: {exc}") from exc

    return {
        "token": token.connection_token,
        "url": token.endpoint_url,
        "roomName": token.room,
        "participantName": token.identity,
    }


__all__ = ["TokenRequest", "generate_room_name", "issue_room_token"]
