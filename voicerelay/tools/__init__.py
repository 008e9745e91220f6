from .dispatcher import ToolSpec, ToolDispatcher
from .builtin import build_default_dispatcher

__all__ = ["ToolDispatcher", "ToolSpec", "build_default_dispatcher"]
