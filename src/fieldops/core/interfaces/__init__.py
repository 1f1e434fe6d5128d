"""Core interfaces/abstractions.

Contracts (Protocol) implemented by concrete adapters: the core depends on
these, never on httpx or the logging setup directly.
"""

from fieldops.core.interfaces.transport import (
    HttpMethod,
    Logger,
    RequestOptions,
    TokenProvider,
    Transport,
)

__all__ = [
    "HttpMethod",
    "Logger",
    "RequestOptions",
    "TokenProvider",
    "Transport",
]
