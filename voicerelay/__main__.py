"""Run the relay server: `python -m voicerelay`."""

from __future__ import annotations

import os

import uvicorn

from voicerelay.config.logging import LOG_LEVEL
from voicerelay.config.server import ENV_SERVER_HOST, ENV_SERVER_PORT, DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT


def main() -> None:
    host = (os.getenv(ENV_SERVER_HOST) or "").strip() or DEFAULT_SERVER_HOST
    try:
        port = int(os.getenv(ENV_SERVER_PORT) or DEFAULT_SERVER_PORT)
    except ValueError:
        port = DEFAULT_SERVER_PORT
    uvicorn.run("voicerelay.server:app", host=host, port=port, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
