"""Room access tokens for the real-time media provider (LiveKit-compatible JWTs)."""

from __future__ import annotations

import time
import logging
from typing import Any
from dataclasses import dataclass

from jose import JWTError, jwt

from voicerelay.errors import TokenIssueError
from voicerelay.state.settings import MediaSettings
from voicerelay.config.media import LIVEKIT_TOKEN_ALGORITHM

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoomToken:
    connection_token: str
    endpoint_url: str
    room: str
    identity: str


class RoomTokenIssuer:
    """Signs room-join grants with the media API secret.

    Claims follow the LiveKit access token layout: `iss` is the API key, `sub`
    the participant identity, and the `video` grant carries the room permissions.
    """

    def __init__(self, settings: MediaSettings, *, clock=time.time) -> None:
        self._settings = settings
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._settings.api_key and self._settings.api_secret)

    def build_claims(self, room: str, identity: str, *, name: str | None = None) -> dict[str, Any]:
        now = int(self._clock())
        return {
            "iss": self._settings.api_key,
            "sub": identity,
            "nbf": now,
            "exp": now + int(self._settings.token_ttl_s),
            "name": name or identity,
            "video": {
                "roomJoin": True,
                "room": room,
                "canPublish": True,
                "canSubscribe": True,
            },
        }

    def issue(self, room: str, identity: str, *, name: str | None = None) -> RoomToken:
        if not self.configured:
            raise TokenIssueError("media API credentials are not configured")
        if not room or not identity:
            raise TokenIssueError("room and identity are required")

        try:
            encoded = jwt.encode(
                self.build_claims(room, identity, name=name),
                self._settings.api_secret,
                algorithm=LIVEKIT_TOKEN_ALGORITHM,
            )
        except JWTError as exc:
            raise TokenIssueError(f"token signing failed: {exc}") from exc

        logger.info("issued room token identity=%s room=%s ttl_s=%s", identity, room, self._settings.token_ttl_s)
        return RoomToken(
            connection_token=encoded,
            endpoint_url=self._settings.url,
            room=room,
            identity=identity,
        )


__all__ = ["RoomToken", "RoomTokenIssuer"]
