"""Session Channel: one client's logical connection to the upstream realtime API."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections import deque
from collections.abc import Callable

import orjson

from voicerelay.errors import MalformedEnvelope
from voicerelay.config.websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_INTERNAL_CODE,
    WS_CLOSE_TRY_AGAIN_CODE,
    WS_CLOSE_QUEUE_FULL_REASON,
    WS_CLOSE_CLIENT_GONE_REASON,
    WS_CLOSE_UPSTREAM_ERROR_REASON,
    WS_CLOSE_UPSTREAM_CLOSED_REASON,
)

from .upstream import UpstreamConnector
from .links import Link, UpstreamLink
from .events import SESSION_READY_TYPES, ErrorEvent, RawMessage, UpstreamEvent, parse_upstream_event

logger = logging.getLogger(__name__)

Listener = Callable[[UpstreamEvent], None]


class SessionChannel:
    """Mediates one client session with the upstream service.

    Client messages are held in arrival order until the upstream signals
    `session.created`/`session.updated`, then flushed once; after that they
    go straight through. Upstream messages are always forwarded to the
    client unmodified, before they are inspected.

    All state is mutated on the event loop by this channel's own tasks, so no
    locking is needed. `ready` only flips after the pending queue is empty, and
    there is no await between that check and the flip.
    """

    def __init__(
        self,
        *,
        client: Link,
        upstream: UpstreamLink,
        connection_id: int,
        model: str,
        pending_queue_max: int = 0,
    ) -> None:
        self._client = client
        self._upstream = upstream
        self.connection_id = connection_id
        self.model = model
        self._pending_queue_max = max(0, int(pending_queue_max))

        self._ready = False
        self._closed = False
        self._pending: deque[RawMessage] = deque()
        self._listeners: list[Listener] = []
        self._upstream_close_task: asyncio.Task | None = None

        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.sent_upstream: int = 0
        self.sent_client: int = 0

    @classmethod
    async def open(
        cls,
        client: Link,
        connector: UpstreamConnector,
        *,
        model: str,
        connection_id: int,
        pending_queue_max: int = 0,
    ) -> SessionChannel:
        """Connect upstream (credentials attached by the connector). Raises UpstreamUnreachable."""
        upstream = await connector.connect(model)
        logger.info("connection_id=%s upstream connected model=%s; waiting for session", connection_id, model)
        return cls(
            client=client,
            upstream=upstream,
            connection_id=connection_id,
            model=model,
            pending_queue_max=pending_queue_max,
        )

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a handler for parsed upstream events. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    async def forward_client_message(self, raw: RawMessage) -> None:
        if self._closed:
            # Teardown races with late sends (e.g. tool results) are expected.
            logger.debug("connection_id=%s dropping client message on closed channel", self.connection_id)
            return

        if not self._ready:
            if self._pending_queue_max and len(self._pending) >= self._pending_queue_max:
                logger.warning(
                    "connection_id=%s pending queue full (%d messages) before session was ready",
                    self.connection_id,
                    len(self._pending),
                )
                await self.close(code=WS_CLOSE_TRY_AGAIN_CODE, reason=WS_CLOSE_QUEUE_FULL_REASON)
                return
            self._pending.append(raw)
            return

        await self._send_upstream(raw)

    async def forward_upstream_message(self, raw: RawMessage) -> None:
        if self._closed:
            return

        await self._send_client(raw)
        if self._closed:
            return

        try:
            event = parse_upstream_event(raw)
        except MalformedEnvelope as exc:
            logger.warning("connection_id=%s unparseable upstream message forwarded as-is: %s", self.connection_id, exc)
            return

        if event.type in SESSION_READY_TYPES:
            await self._mark_ready(event.type)
        elif isinstance(event, ErrorEvent):
            logger.error(
                "connection_id=%s upstream error: %s",
                self.connection_id,
                orjson.dumps(event.error).decode("utf-8"),
            )

        self._notify(event)

    async def run(self) -> None:
        """Pump upstream messages to the client until the upstream link ends."""
        try:
            async for message in self._upstream:
                await self.forward_upstream_message(message)
                if self._closed:
                    return
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("connection_id=%s upstream link failed: %s", self.connection_id, exc)
            await self.close(code=WS_CLOSE_INTERNAL_CODE, reason=WS_CLOSE_UPSTREAM_ERROR_REASON)
            return

        await self.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_UPSTREAM_CLOSED_REASON)

    async def close(self, *, code: int = WS_CLOSE_NORMAL_CODE, reason: str = "") -> None:
        """Close both links. Idempotent.

        The client link is closed inline; the upstream close handshake runs in
        the background so teardown never waits on the upstream's acknowledgement.
        """
        if self._closed:
            return
        self._closed = True
        self.close_code = code
        self.close_reason = reason
        self._pending.clear()
        self._listeners.clear()

        self._upstream_close_task = asyncio.create_task(self._close_link(self._upstream, WS_CLOSE_NORMAL_CODE, ""))
        await self._close_link(self._client, code, reason)
        logger.info(
            "connection_id=%s channel closed code=%s reason=%r sent_upstream=%d sent_client=%d",
            self.connection_id,
            code,
            reason,
            self.sent_upstream,
            self.sent_client,
        )

    async def wait_closed(self) -> None:
        task = self._upstream_close_task
        if task is not None:
            await task

    async def _mark_ready(self, event_type: str) -> None:
        if self._ready:
            return
        flushed = 0
        while self._pending:
            await self._send_upstream(self._pending.popleft())
            flushed += 1
        if self._closed:
            return
        self._ready = True
        logger.info(
            "connection_id=%s %s: session ready, flushed %d buffered message(s)",
            self.connection_id,
            event_type,
            flushed,
        )

    async def _send_upstream(self, raw: RawMessage) -> None:
        try:
            await self._upstream.send(raw)
        except Exception as exc:
            logger.warning("connection_id=%s upstream send failed: %s", self.connection_id, exc)
            await self.close(code=WS_CLOSE_INTERNAL_CODE, reason=WS_CLOSE_UPSTREAM_ERROR_REASON)
            return
        self.sent_upstream += 1

    async def _send_client(self, raw: RawMessage) -> None:
        try:
            await self._client.send(raw)
        except Exception as exc:
            logger.info("connection_id=%s client send failed: %s", self.connection_id, exc)
            await self.close(code=WS_CLOSE_NORMAL_CODE, reason=WS_CLOSE_CLIENT_GONE_REASON)
            return
        self.sent_client += 1

    def _notify(self, event: UpstreamEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("connection_id=%s event listener failed for %s", self.connection_id, event.type)

    async def _close_link(self, link: Link, code: int, reason: str) -> None:
        try:
            await link.close(code=code, reason=reason)
        except Exception:
            logger.debug("connection_id=%s link close failed", self.connection_id, exc_info=True)


__all__ = ["Listener", "SessionChannel"]
