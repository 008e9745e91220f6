"""Registry of callable tools the upstream model may invoke."""

from __future__ import annotations

import inspect
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

from voicerelay.errors import ToolError

logger = logging.getLogger(__name__)

ToolFn = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    name: str
    fn: ToolFn
    description: str
    parameters: dict[str, Any]

    def definition(self) -> dict[str, Any]:
        return {
            "type": "function",
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


class ToolDispatcher:
    """Per-instance tool registry.

    Tools are called with the parsed arguments as keyword arguments and may be
    plain functions or coroutine functions. Every failure surfaces as `ToolError`.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        fn: ToolFn,
        *,
        description: str = "",
        parameters: dict[str, Any] | None = None,
    ) -> None:
        if not name:
            raise ValueError("tool name must be non-empty")
        if name in self._tools:
            logger.warning("replacing registered tool %s", name)
        self._tools[name] = ToolSpec(
            name=name,
            fn=fn,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}, "required": []},
        )

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def definitions(self) -> list[dict[str, Any]]:
        """Function definitions in the shape `session.update` advertises them."""
        return [tool.definition() for tool in self._tools.values()]

    async def execute(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolError(name=name, reason="unknown function")

        try:
            result = tool.fn(**args)
            if inspect.isawaitable(result):
                result = await result
        except ToolError:
            raise
        except Exception as exc:
            raise ToolError(name=name, reason=str(exc) or type(exc).__name__) from exc

        if not isinstance(result, dict):
            result = {"result": result}
        return result


__all__ = ["ToolDispatcher", "ToolFn", "ToolSpec"]
