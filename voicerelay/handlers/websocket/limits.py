"""Rate limiting of client messages on the relay socket."""

from __future__ import annotations

import math
from typing import Any

from fastapi import WebSocket

from voicerelay.errors import RateLimitError
from voicerelay.config.websocket import WS_ERROR_RATE_LIMITED
from voicerelay.handlers.limits import SlidingWindowRateLimiter

from .errors import send_error


async def consume_limiter(ws: WebSocket, limiter: SlidingWindowRateLimiter, *, connection_id: int) -> bool:
    """Returns False (after telling the client) when the message must be dropped."""
    try:
        limiter.consume()
    except RateLimitError as exc:
        retry_in_s = int(max(1, math.ceil(float(exc.retry_in))))
        window_s = int(exc.window_seconds)
        details: dict[str, Any] = {
            "retry_in": retry_in_s,
            "limit": exc.limit,
            "window_seconds": window_s,
            "connection_id": connection_id,
        }
        await send_error(
            ws,
            error_code=WS_ERROR_RATE_LIMITED,
            message=f"message rate limit: at most {exc.limit} per {window_s} seconds; retry in {retry_in_s} seconds",
            details=details,
        )
        return False
    return True


__all__ = ["consume_limiter"]
