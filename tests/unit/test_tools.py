from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from voicerelay.errors import ToolError
from voicerelay.tools import ToolDispatcher, build_default_dispatcher
from voicerelay.tools.builtin import get_current_time, get_current_weather, make_wikipedia_search
from tests.utils.fakes import make_settings


@pytest.mark.asyncio
async def test_execute_plain_and_coroutine_functions() -> None:
    dispatcher = ToolDispatcher()

    async def double(x: int) -> dict:
        return {"value": x * 2}

    dispatcher.register("double", double)
    dispatcher.register("echo", lambda text: {"text": text})

    assert await dispatcher.execute("double", {"x": 4}) == {"value": 8}
    assert await dispatcher.execute("echo", {"text": "hi"}) == {"text": "hi"}


@pytest.mark.asyncio
async def test_execute_wraps_non_dict_results() -> None:
    dispatcher = ToolDispatcher()
    dispatcher.register("answer", lambda: 42)
    assert await dispatcher.execute("answer", {}) == {"result": 42}


@pytest.mark.asyncio
async def test_unknown_tool_raises_tool_error() -> None:
    with pytest.raises(ToolError) as exc:
        await ToolDispatcher().execute("missing", {})
    assert exc.value.name == "missing"


@pytest.mark.asyncio
async def test_failures_raise_tool_error() -> None:
    dispatcher = ToolDispatcher()

    def explode() -> dict:
        raise ValueError("kaboom")

    dispatcher.register("explode", explode)
    dispatcher.register("needs_arg", lambda city: {"city": city})

    with pytest.raises(ToolError, match="kaboom"):
        await dispatcher.execute("explode", {})
    with pytest.raises(ToolError):
        await dispatcher.execute("needs_arg", {"wrong": 1})


def test_definitions_and_registries_are_per_instance() -> None:
    a, b = ToolDispatcher(), ToolDispatcher()
    a.register("f", lambda: {}, description="does f", parameters={"type": "object", "properties": {}})
    assert a.definitions() == [
        {"type": "function", "name": "f", "description": "does f", "parameters": {"type": "object", "properties": {}}}
    ]
    assert "f" in a
    assert b.definitions() == []


def test_default_dispatcher_registers_builtins() -> None:
    dispatcher = build_default_dispatcher(make_settings().tools)
    assert dispatcher.names() == ["get_current_weather", "get_current_time", "search_wikipedia"]
    for definition in dispatcher.definitions():
        assert definition["type"] == "function"
        assert definition["parameters"]["type"] == "object"


def test_weather_uses_mock_data_with_fallback() -> None:
    known = get_current_weather(" Hanoi ")
    assert known["city"] == "Hanoi"
    assert known["temperature"] == 28
    assert known["unit"] == "Celsius"
    assert get_current_weather("Atlantis")["temperature"] == 27


def test_current_time_in_timezone() -> None:
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    out = get_current_time("Asia/Ho_Chi_Minh", now=now)
    assert out["timezone"] == "Asia/Ho_Chi_Minh"
    assert "19:00:00" in out["current_time"]
    assert out["timestamp"] == now.isoformat()


@pytest.mark.asyncio
async def test_unknown_timezone_surfaces_as_tool_error() -> None:
    dispatcher = build_default_dispatcher(make_settings().tools)
    with pytest.raises(ToolError):
        await dispatcher.execute("get_current_time", {"timezone": "Mars/Olympus_Mons"})


@pytest.mark.asyncio
async def test_wikipedia_summary() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(
            200,
            json={
                "title": "Ada Lovelace",
                "extract": "English mathematician.",
                "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Ada_Lovelace"}},
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        search = make_wikipedia_search(lang="en", timeout_s=1.0, client=client)
        out = await search("Ada Lovelace")

    assert requested == ["https://en.wikipedia.org/api/rest_v1/page/summary/Ada%20Lovelace"]
    assert out == {
        "title": "Ada Lovelace",
        "summary": "English mathematician.",
        "url": "https://en.wikipedia.org/wiki/Ada_Lovelace",
        "query": "Ada Lovelace",
    }


@pytest.mark.asyncio
async def test_wikipedia_not_found_and_transport_errors() -> None:
    def not_found(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"title": "Not found."})

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(not_found)) as client:
        out = await make_wikipedia_search(lang="vi", timeout_s=1.0, client=client)("Hà Nội")
    assert out["query"] == "Hà Nội"
    assert "error" in out

    async with httpx.AsyncClient(transport=httpx.MockTransport(broken)) as client:
        out = await make_wikipedia_search(lang="en", timeout_s=1.0, client=client)("x")
    assert out == {"error": "lookup failed", "query": "x"}
