"""Transports that carry record requests to the REST resource."""

from typing import Optional

from restrecord.infrastructure.transport.httpx_transport import HttpxTransport
from restrecord.infrastructure.transport.transport import Transport, TransportResponse

_default_transport: Optional[Transport] = None


def get_default_transport() -> Transport:
    """Shared HttpxTransport built from the cached settings."""
    global _default_transport
    if _default_transport is None:
        _default_transport = HttpxTransport()
    return _default_transport


def set_default_transport(transport: Optional[Transport]) -> None:
    """Replace the shared transport (None resets to a fresh HttpxTransport)."""
    global _default_transport
    _default_transport = transport


__all__ = [
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "get_default_transport",
    "set_default_transport",
]
