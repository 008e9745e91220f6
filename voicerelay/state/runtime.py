"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx

    from voicerelay.tools import ToolDispatcher
    from voicerelay.state.settings import AppSettings
    from voicerelay.runtime.tokens import RoomTokenIssuer
    from voicerelay.realtime.upstream import UpstreamConnector
    from voicerelay.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    settings: AppSettings
    connections: ConnectionManager
    connector: UpstreamConnector
    token_issuer: RoomTokenIssuer
    tools: ToolDispatcher
    http_client: httpx.AsyncClient | None = None

    async def shutdown(self) -> None:
        if self.http_client is None:
            return
        try:
            await self.http_client.aclose()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
