from __future__ import annotations

from collections.abc import Callable
from typing import Any, Union

import pytest

from fieldops.core.config import AppSettings
from fieldops.core.interfaces.transport import RequestOptions

Reply = Union[dict[str, Any], BaseException, Callable[[RequestOptions], Any]]


class StubTransport:
    """Replays canned replies in order and records every request."""

    def __init__(self, *replies: Reply) -> None:
        self.replies: list[Reply] = list(replies)
        self.calls: list[RequestOptions] = []

    def queue(self, *replies: Reply) -> None:
        self.replies.extend(replies)

    async def request(self, options: RequestOptions) -> dict[str, Any]:
        self.calls.append(options)
        if not self.replies:
            raise AssertionError(f"unexpected request: {options.method} {options.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            result = reply(options)
            if hasattr(result, "__await__"):
                result = await result
            return result
        return reply

    def methods(self) -> list[tuple[str, str]]:
        return [(c.method, c.url) for c in self.calls]


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, Any]] = []

    def log(self, label: str, payload: Any = None) -> None:
        self.records.append((label, payload))

    def outcomes(self) -> list[dict[str, Any]]:
        return [p for _, p in self.records if isinstance(p, dict) and "outcome" in p]


def ok(data: Any = None, **meta: Any) -> dict[str, Any]:
    base = {"code": 200, "status": "success", "message": "OK"}
    base.update(meta)
    return {"meta": base, "data": data}


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(base_url="https://api.test/api", language="en")


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()
