"""Runtime package.

Keep this module dependency-light: importing `voicerelay.runtime.*` from unit
tests should not open sockets or read credentials.
"""

__all__: list[str] = []
