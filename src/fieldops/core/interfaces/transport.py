"""Collaborator contracts consumed by the API layer.

Why Protocol:
- Structural contracts (duck typing) without rigid inheritance.
- Tests swap in recording stubs; the CLI wires the httpx adapter, the file
  token store and the stdlib-logging adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from fieldops.core.domain.models import FormPayload

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]


@dataclass(frozen=True)
class RequestOptions:
    """Everything the transport needs for one request."""

    url: str
    method: HttpMethod
    label: str
    body: dict[str, Any] | FormPayload | None = None
    token: str | None = None


@runtime_checkable
class Transport(Protocol):
    """Performs one HTTP request.

    Rules:
    - JSON-serializes dict bodies, sends `FormPayload` as multipart.
    - Adds `Authorization: Bearer <token>` when `token` is set.
    - Returns the parsed body on success; raises `ApiRequestError` (with a
      human-readable `message`) on non-2xx or network failure.
    """

    async def request(self, options: RequestOptions) -> dict[str, Any]:
        ...


@runtime_checkable
class Logger(Protocol):
    """Fire-and-forget diagnostic sink; must never raise."""

    def log(self, label: str, payload: Any = None) -> None:
        ...


@runtime_checkable
class TokenProvider(Protocol):
    """Returns the current bearer token (or None); called for every request."""

    def __call__(self) -> str | None:
        ...
