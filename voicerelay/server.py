"""Main FastAPI server for the realtime voice relay."""

from __future__ import annotations

import logging
from typing import Any
from contextlib import asynccontextmanager
from collections.abc import Callable, Awaitable

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import ORJSONResponse

from voicerelay.state import RuntimeDeps
from voicerelay.config.websocket import WS_ENDPOINT_PATH
from voicerelay.runtime.logging import configure_logging
from voicerelay.runtime.dependencies import build_runtime_deps
from voicerelay.handlers.tokens import TokenRequest, issue_room_token
from voicerelay.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

DepsBuilder = Callable[[], Awaitable[RuntimeDeps]]


def _runtime_deps(app: FastAPI) -> RuntimeDeps:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    return runtime_deps


def build_app(deps_builder: DepsBuilder = build_runtime_deps) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        app.state.runtime_deps = await deps_builder()
        logger.info("runtime: ready")
        try:
            yield
        finally:
            deps = getattr(app.state, "runtime_deps", None)
            if deps is not None:
                await deps.shutdown()

    app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        deps = _runtime_deps(request.app)
        return {
            "status": "ok",
            "connections": deps.connections.get_connection_count(),
            "max_connections": deps.connections.max_connections,
        }

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/tools")
    async def tool_definitions(request: Request) -> dict[str, Any]:
        return {"tools": _runtime_deps(request.app).tools.definitions()}

    @app.post("/api/livekit/token")
    async def livekit_token(body: TokenRequest, request: Request) -> dict[str, str]:
        return issue_room_token(body, _runtime_deps(request.app))

    @app.websocket(WS_ENDPOINT_PATH)
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await handle_websocket_connection(websocket, _runtime_deps(websocket.app))

    return app


configure_logging()

app = build_app()

__all__ = ["app", "build_app"]
