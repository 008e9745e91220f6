"""Logging configuration."""

from __future__ import annotations

import os

LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT: str = (os.getenv("LOG_FORMAT") or "").strip() or "%(asctime)s %(levelname)s %(name)s: %(message)s"

ENV_SHOW_LIBRARY_LOGS = "SHOW_LIBRARY_LOGS"

# Third-party loggers that are chatty at INFO/DEBUG.
NOISY_LOGGERS = ("websockets", "websockets.client", "httpx", "httpcore")

__all__ = ["ENV_SHOW_LIBRARY_LOGS", "LOG_FORMAT", "LOG_LEVEL", "NOISY_LOGGERS"]
