"""Built-in tools: mock weather, wall-clock time, Wikipedia summaries."""

from __future__ import annotations

import logging
from typing import Any
from datetime import datetime, timezone
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx

from voicerelay.state.settings import ToolSettings

from .dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

WIKIPEDIA_SUMMARY_URL = "https://{lang}.wikipedia.org/api/rest_v1/page/summary/{title}"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_COUNTRY = "Vietnam"

# Demo data; there is no weather provider behind this tool.
_MOCK_WEATHER: dict[str, dict[str, Any]] = {
    "hanoi": {"temperature": 28, "description": "sunny with some clouds", "humidity": 65, "wind_speed": 12},
    "ho chi minh city": {"temperature": 32, "description": "hot and sunny", "humidity": 75, "wind_speed": 8},
    "da nang": {"temperature": 30, "description": "clear skies", "humidity": 70, "wind_speed": 15},
}
_FALLBACK_WEATHER: dict[str, Any] = {"temperature": 27, "description": "cloudy", "humidity": 68, "wind_speed": 10}

WEATHER_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "city": {"type": "string", "description": "City name, e.g. Hanoi"},
        "country": {"type": "string", "description": "Country name", "default": DEFAULT_COUNTRY},
    },
    "required": ["city"],
}

TIME_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "timezone": {
            "type": "string",
            "description": "IANA timezone, e.g. Asia/Ho_Chi_Minh",
            "default": DEFAULT_TIMEZONE,
        },
    },
    "required": [],
}

WIKIPEDIA_PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {"query": {"type": "string", "description": "Article title or search keywords"}},
    "required": ["query"],
}


def get_current_weather(city: str, country: str = DEFAULT_COUNTRY) -> dict[str, Any]:
    name = city.strip()
    data = _MOCK_WEATHER.get(name.lower(), _FALLBACK_WEATHER)
    return {"city": name, "country": country, **data, "unit": "Celsius"}


def get_current_time(timezone_name: str = DEFAULT_TIMEZONE, *, now: datetime | None = None) -> dict[str, Any]:
    """Current time in `timezone_name`. Unknown zones raise (surfaced as a tool error)."""
    utc_now = now or datetime.now(timezone.utc)
    local = utc_now.astimezone(ZoneInfo(timezone_name))
    return {
        "timezone": timezone_name,
        "current_time": local.strftime("%A, %d %B %Y %H:%M:%S %Z"),
        "timestamp": utc_now.isoformat(),
    }


async def _get_current_time_tool(timezone: str = DEFAULT_TIMEZONE) -> dict[str, Any]:
    return get_current_time(timezone)


def make_wikipedia_search(
    *,
    lang: str,
    timeout_s: float,
    client: httpx.AsyncClient | None = None,
):
    """Build the `search_wikipedia` tool bound to a language edition.

    HTTP failures are returned as `{"error": ..., "query": ...}` so the model can
    tell the user nothing was found.
    """

    async def search_wikipedia(query: str) -> dict[str, Any]:
        url = WIKIPEDIA_SUMMARY_URL.format(lang=lang, title=quote(query.strip(), safe=""))
        try:
            if client is not None:
                response = await client.get(url, timeout=timeout_s)
            else:
                async with httpx.AsyncClient(timeout=timeout_s) as owned:
                    response = await owned.get(url)
        except httpx.HTTPError as exc:
            logger.warning("wikipedia lookup failed query=%r: %s", query, exc)
            return {"error": "lookup failed", "query": query}

        if response.status_code != 200:
            logger.info("wikipedia lookup query=%r status=%s", query, response.status_code)
            return {"error": "no information found", "query": query}

        data = response.json()
        page_url = ((data.get("content_urls") or {}).get("desktop") or {}).get("page") or ""
        return {
            "title": data.get("title", ""),
            "summary": data.get("extract", ""),
            "url": page_url,
            "query": query,
        }

    return search_wikipedia


def build_default_dispatcher(
    settings: ToolSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> ToolDispatcher:
    dispatcher = ToolDispatcher()
    dispatcher.register(
        "get_current_weather",
        get_current_weather,
        description="Get the current weather for a city. Use when the user asks about the weather.",
        parameters=WEATHER_PARAMETERS,
    )
    dispatcher.register(
        "get_current_time",
        _get_current_time_tool,
        description="Get the current time. Use when the user asks what time it is.",
        parameters=TIME_PARAMETERS,
    )
    dispatcher.register(
        "search_wikipedia",
        make_wikipedia_search(lang=settings.wikipedia_lang, timeout_s=settings.http_timeout_s, client=http_client),
        description="Look up a topic, person or event on Wikipedia and return a short summary.",
        parameters=WIKIPEDIA_PARAMETERS,
    )
    return dispatcher


__all__ = [
    "WIKIPEDIA_SUMMARY_URL",
    "build_default_dispatcher",
    "get_current_time",
    "get_current_weather",
    "make_wikipedia_search",
]
