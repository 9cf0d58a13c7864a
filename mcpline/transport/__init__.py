"""Transports that feed envelopes into the invocation pipeline."""

from .base import Transport, TransportState
from .envelope import ErrorCode
from .stdio import StdioTransport, create_stdio_transport

__all__ = [
    "Transport",
    "TransportState",
    "ErrorCode",
    "StdioTransport",
    "create_stdio_transport",
]
