from .channel import SessionChannel
from .links import Link, UpstreamLink
from .upstream import UpstreamConnector
from .local_link import LocalClientLink
from .client_link import StarletteClientLink

__all__ = [
    "Link",
    "LocalClientLink",
    "SessionChannel",
    "StarletteClientLink",
    "UpstreamConnector",
    "UpstreamLink",
]
