from __future__ import annotations

import json
import time

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from voicerelay.server import build_app
from voicerelay.state import RuntimeDeps
from voicerelay.state.settings import AppSettings
from voicerelay.tools import build_default_dispatcher
from voicerelay.runtime.tokens import RoomTokenIssuer
from voicerelay.handlers.connections import ConnectionManager
from voicerelay.config.websocket import (
    WS_CLOSE_BUSY_CODE,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_INTERNAL_CODE,
    WS_CLOSE_UNSUPPORTED_MODEL_CODE,
    WS_CLOSE_UPSTREAM_CLOSED_REASON,
    WS_CLOSE_UPSTREAM_UNREACHABLE_REASON,
)
from tests.utils.fakes import FakeConnector, event, make_settings


def _client(connector: FakeConnector, settings: AppSettings | None = None) -> TestClient:
    settings = settings or make_settings()

    async def deps_builder() -> RuntimeDeps:
        return RuntimeDeps(
            settings=settings,
            connections=ConnectionManager(max_connections=settings.limits.max_concurrent_connections),
            connector=connector,
            token_issuer=RoomTokenIssuer(settings.media),
            tools=build_default_dispatcher(settings.tools),
        )

    return TestClient(build_app(deps_builder))


def test_health_endpoints() -> None:
    with _client(FakeConnector()) as client:
        assert client.get("/").json() == {"status": "ok"}
        assert client.get("/healthz").json() == {"status": "ok"}
        health = client.get("/health").json()
        assert health["status"] == "ok"
        assert health["connections"] == 0


def test_tool_definitions_endpoint() -> None:
    with _client(FakeConnector()) as client:
        tools = client.get("/api/tools").json()["tools"]
    assert [t["name"] for t in tools] == ["get_current_weather", "get_current_time", "search_wikipedia"]


def test_relay_forwards_both_directions() -> None:
    connector = FakeConnector(auto_session=True, echo=True)
    with _client(connector) as client:
        with client.websocket_connect("/?model=gpt-test") as ws:
            assert ws.receive_json()["type"] == "session.created"
            ws.send_text(event("session.update", session={"voice": "alloy"}))
            echo = ws.receive_json()
            assert echo["type"] == "test.echo"
            assert echo["received"] == {"type": "session.update", "session": {"voice": "alloy"}}

    assert connector.models == ["gpt-test"]
    assert connector.upstreams[0].closed


def test_default_model_used_without_query() -> None:
    connector = FakeConnector(auto_session=True)
    with _client(connector) as client:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
    assert connector.models == ["test-model"]


def test_text_and_binary_frames_forwarded_in_order() -> None:
    connector = FakeConnector(script=(event("session.created", session={}),), echo=True)
    with _client(connector) as client:
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "session.created"
            ws.send_text(event("session.update", n=1))
            ws.send_bytes(event("input_audio_buffer.append", audio="AAAA").encode())
            first = ws.receive_json()
            second = ws.receive_json()

    assert first["received"]["type"] == "session.update"
    assert second["received"]["type"] == "input_audio_buffer.append"
    assert connector.upstreams[0].sent_types() == ["session.update", "input_audio_buffer.append"]


def test_malformed_client_message_is_not_forwarded() -> None:
    connector = FakeConnector(auto_session=True, echo=True)
    with _client(connector) as client:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_text("not json at all")
            err = ws.receive_json()
            assert err["type"] == "error"
            assert err["error"]["type"] == "relay_error"
            assert err["error"]["code"] == "malformed_envelope"

            ws.send_text(event("response.create"))
            assert ws.receive_json()["type"] == "test.echo"

    assert connector.upstreams[0].sent_types() == ["response.create"]


def test_rate_limited_messages_are_dropped() -> None:
    connector = FakeConnector(auto_session=True, echo=True)
    with _client(connector, make_settings(max_messages=1)) as client:
        with client.websocket_connect("/") as ws:
            ws.receive_json()
            ws.send_text(event("response.create"))
            assert ws.receive_json()["type"] == "test.echo"
            ws.send_text(event("response.create"))
            err = ws.receive_json()
            assert err["error"]["code"] == "rate_limited"
            assert err["error"]["details"]["limit"] == 1

    assert len(connector.upstreams[0].sent) == 1


def test_upstream_unreachable_closes_client_with_reason() -> None:
    with _client(FakeConnector(error="connection refused")) as client:
        with client.websocket_connect("/") as ws:
            err = ws.receive_json()
            assert err["error"]["code"] == "upstream_unreachable"
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_text()
    assert exc.value.code == WS_CLOSE_INTERNAL_CODE
    assert exc.value.reason == WS_CLOSE_UPSTREAM_UNREACHABLE_REASON


def test_upstream_end_closes_client() -> None:
    connector = FakeConnector(script=(event("session.created"), event("response.done")), end_after_script=True)
    with _client(connector) as client:
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "session.created"
            assert ws.receive_json()["type"] == "response.done"
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_text()
    assert exc.value.code == WS_CLOSE_NORMAL_CODE
    assert exc.value.reason == WS_CLOSE_UPSTREAM_CLOSED_REASON


def test_unsupported_model_is_rejected() -> None:
    connector = FakeConnector(auto_session=True)
    with _client(connector, make_settings(allowed_models=("allowed-model",))) as client:
        with client.websocket_connect("/?model=other-model") as ws:
            err = ws.receive_json()
            assert err["error"]["code"] == "unsupported_model"
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_text()
    assert exc.value.code == WS_CLOSE_UNSUPPORTED_MODEL_CODE
    assert connector.models == []


def test_server_at_capacity_rejects() -> None:
    connector = FakeConnector(auto_session=True)
    with _client(connector, make_settings(max_connections=1)) as client:
        with client.websocket_connect("/") as first:
            first.receive_json()
            with client.websocket_connect("/") as second:
                err = second.receive_json()
                assert err["error"]["code"] == "server_at_capacity"
                with pytest.raises(WebSocketDisconnect) as exc:
                    second.receive_text()
    assert exc.value.code == WS_CLOSE_BUSY_CODE
    assert len(connector.upstreams) == 1


def test_concurrent_sessions_stay_separate() -> None:
    connector = FakeConnector(auto_session=True, echo=True)
    with _client(connector) as client:
        with client.websocket_connect("/") as a:
            a.receive_json()
            with client.websocket_connect("/") as b:
                b.receive_json()
                for i in range(5):
                    a.send_text(event("input_audio_buffer.append", who="a", n=i))
                    b.send_text(event("input_audio_buffer.append", who="b", n=i))
                got_a = [a.receive_json()["received"] for _ in range(5)]
                got_b = [b.receive_json()["received"] for _ in range(5)]

    assert [(m["who"], m["n"]) for m in got_a] == [("a", i) for i in range(5)]
    assert [(m["who"], m["n"]) for m in got_b] == [("b", i) for i in range(5)]
    up_a, up_b = connector.upstreams
    assert {json.loads(m)["who"] for m in up_a.sent} == {"a"}
    assert {json.loads(m)["who"] for m in up_b.sent} == {"b"}


def test_teardown_releases_slot_without_waiting_for_upstream_close() -> None:
    connector = FakeConnector(auto_session=True, hang_close=True)
    with _client(connector, make_settings(max_connections=1, close_timeout_s=0.1)) as client:
        started = time.monotonic()
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "session.created"
        assert time.monotonic() - started < 5.0
        assert client.get("/health").json()["connections"] == 0

        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "session.created"

    assert len(connector.upstreams) == 2
    assert connector.upstreams[0].closed


def test_token_endpoint_issues_token() -> None:
    with _client(FakeConnector()) as client:
        resp = client.post("/api/livekit/token", json={"roomName": "r1", "participantName": "alice"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["roomName"] == "r1"
        assert body["participantName"] == "alice"
        assert body["url"] == "wss://media.test"
        assert body["token"].count(".") == 2

        generated = client.post("/api/livekit/token", json={"participant_name": "bob"}).json()
        assert generated["roomName"].startswith("room-")


def test_token_endpoint_validation_and_misconfiguration() -> None:
    with _client(FakeConnector()) as client:
        assert client.post("/api/livekit/token", json={"roomName": "r1", "participantName": "  "}).status_code == 400
        assert client.post("/api/livekit/token", json={"roomName": "r1"}).status_code == 400

    with _client(FakeConnector(), make_settings(livekit_secret="")) as client:
        assert client.post("/api/livekit/token", json={"participantName": "alice"}).status_code == 500
