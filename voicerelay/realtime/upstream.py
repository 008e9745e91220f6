"""Authenticated connection to the upstream realtime API."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import websockets
from websockets.exceptions import InvalidURI, InvalidHandshake

from voicerelay.errors import UpstreamUnreachable
from voicerelay.state.settings import UpstreamSettings
from voicerelay.config.upstream import UPSTREAM_AUTH_HEADER, UPSTREAM_BETA_VALUE, UPSTREAM_BETA_HEADER

logger = logging.getLogger(__name__)


class UpstreamConnector:
    """Opens one upstream socket per Session Channel.

    Credentials are attached as handshake headers; the client-facing transport
    never sees them.
    """

    def __init__(self, settings: UpstreamSettings) -> None:
        self._settings = settings

    def build_url(self, model: str) -> str:
        sep = "&" if "?" in self._settings.url else "?"
        return f"{self._settings.url}{sep}{urlencode({'model': model})}"

    def build_headers(self) -> dict[str, str]:
        return {
            UPSTREAM_AUTH_HEADER: f"Bearer {self._settings.api_key}",
            UPSTREAM_BETA_HEADER: UPSTREAM_BETA_VALUE,
        }

    async def connect(self, model: str) -> websockets.ClientConnection:
        if not self._settings.api_key:
            raise UpstreamUnreachable(model=model, reason="upstream credentials are not configured")

        url = self.build_url(model)
        try:
            conn = await websockets.connect(
                url,
                additional_headers=self.build_headers(),
                max_size=self._settings.max_message_bytes,
                open_timeout=self._settings.open_timeout_s,
                close_timeout=self._settings.close_timeout_s,
            )
        except (OSError, TimeoutError, InvalidURI, InvalidHandshake) as exc:
            raise UpstreamUnreachable(model=model, reason=str(exc) or type(exc).__name__) from exc

        logger.debug("upstream connected url=%s", url)
        return conn


__all__ = ["UpstreamConnector"]
