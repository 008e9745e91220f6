"""Duplex link protocols for both sides of the relay."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from collections.abc import AsyncIterator

from .events import RawMessage


@runtime_checkable
class Link(Protocol):
    """What a Session Channel needs from the client side.

    Adapted by `StarletteClientLink` (server) and `LocalClientLink` (in-process bridge).
    """

    async def send(self, message: RawMessage) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


@runtime_checkable
class UpstreamLink(Link, Protocol):
    """A `Link` that also yields inbound messages; `websockets` client connections satisfy it."""

    def __aiter__(self) -> AsyncIterator[RawMessage]: ...


__all__ = ["Link", "UpstreamLink"]
