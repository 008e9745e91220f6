"""WebSocket connection admission control and connection numbering."""

from __future__ import annotations

import asyncio


class ConnectionManager:
    """Admits up to `max_connections` concurrent sessions.

    Also owns the diagnostic connection counter: every admitted connection gets
    the next id, assigned under the same lock as the capacity check.
    """

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._lock = asyncio.Lock()
        self._active: set[int] = set()
        self._next_id = 0

    async def connect(self) -> int | None:
        """Admit a connection (without accepting it). Returns its id, or None when full."""
        async with self._lock:
            if len(self._active) >= self._max:
                return None
            self._next_id += 1
            self._active.add(self._next_id)
            return self._next_id

    async def disconnect(self, connection_id: int) -> None:
        async with self._lock:
            self._active.discard(connection_id)

    def get_connection_count(self) -> int:
        return len(self._active)

    @property
    def total_admitted(self) -> int:
        return self._next_id

    @property
    def max_connections(self) -> int:
        return self._max


__all__ = ["ConnectionManager"]
