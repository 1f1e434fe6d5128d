"""Operation envelope: uniform execution of one API operation.

The envelope wraps a zero-argument coroutine function, flips the owning
client's `pending` / `last_error` state around it, logs the outcome as a
structured record and converts every failure into `ApiResult(success=False)`.
Callers never need a try/except around a client operation.

Stateful clients get an `asyncio.Lock`: operations of one client run one at a
time in invocation order, so a slow, older response can never overwrite the
state produced by a newer operation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from fieldops.core.domain.errors import (
    ApiRequestError,
    ResponseStatusError,
    describe_failure,
    fallback_message,
    message_for,
)
from fieldops.core.domain.language import Language
from fieldops.core.domain.models import ApiResult, PageInfo, ResponseBody
from fieldops.core.interfaces.transport import Logger

EntityT = TypeVar("EntityT")

Operation = Callable[[], Awaitable[ResponseBody]]
SuccessHook = Callable[[ResponseBody], None]


@dataclass
class ClientState(Generic[EntityT]):
    """Mutable state bundle owned by exactly one resource client."""

    collection: list[EntityT] = field(default_factory=list)
    selected: EntityT | None = None
    last_error: str | None = None
    page_info: PageInfo | None = None
    in_flight: int = 0

    @property
    def pending(self) -> bool:
        return self.in_flight > 0


def parse_body(raw: Any, language: Language = Language.ENGLISH) -> ResponseBody:
    """Validate a transport result and reject `meta.status == "error"` bodies."""

    if not isinstance(raw, dict):
        raise ApiRequestError(message_for("invalid_response", language))
    try:
        body = ResponseBody.model_validate(raw)
    except ValidationError as exc:
        raise ApiRequestError(message_for("invalid_response", language)) from exc
    if body.meta.status == "error":
        raise ResponseStatusError(body.meta)
    return body


class OperationEnvelope:
    """Runs operations for one resource (or for auth, without state)."""

    def __init__(
        self,
        resource: str,
        *,
        logger: Logger,
        state: ClientState[Any] | None = None,
        language: Language = Language.ENGLISH,
    ) -> None:
        self._resource = resource
        self._logger = logger
        self._state = state
        self._language = language
        self._lock = asyncio.Lock() if state is not None else None

    @property
    def resource(self) -> str:
        return self._resource

    async def run(
        self,
        operation: Operation,
        name: str,
        on_success: SuccessHook | None = None,
    ) -> ApiResult[Any]:
        state = self._state
        if state is None or self._lock is None:
            return await self._execute(operation, name, on_success)

        state.in_flight += 1
        try:
            async with self._lock:
                return await self._execute(operation, name, on_success)
        finally:
            state.in_flight -= 1

    async def _execute(
        self,
        operation: Operation,
        name: str,
        on_success: SuccessHook | None,
    ) -> ApiResult[Any]:
        state = self._state
        if state is not None:
            state.last_error = None

        try:
            body = await operation()
            if on_success is not None:
                on_success(body)
        except Exception as exc:
            kind, message = describe_failure(
                exc, fallback=fallback_message(name, self._language)
            )
            if state is not None:
                state.last_error = message
            self._emit(name, "error", message, kind=kind.value)
            meta = exc.meta if isinstance(exc, ResponseStatusError) else None
            return ApiResult(success=False, error=message, meta=meta)

        self._emit(name, "success", body.meta.message)
        return ApiResult(success=True, data=body.data, meta=body.meta)

    def _emit(self, operation: str, outcome: str, message: str | None, **extra: Any) -> None:
        suffix = "Success" if outcome == "success" else "Error"
        payload: dict[str, Any] = {
            "resource": self._resource,
            "operation": operation,
            "outcome": outcome,
            "message": message,
        }
        payload.update(extra)
        self._logger.log(f"[{self._resource.upper()}_{operation}] {suffix}", payload)
