"""
Tests for HttpxTransport against httpx.MockTransport.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest
from conftest import RecordingLogger

from fieldops.adapters.http_client import HttpxTransport
from fieldops.core.config import AppSettings
from fieldops.core.domain.errors import ApiRequestError
from fieldops.core.domain.models import FormPayload, UploadFile
from fieldops.core.interfaces.transport import RequestOptions

URL = "https://api.test/api/outlet"

Handler = Callable[[httpx.Request], httpx.Response]


def _transport(
    settings: AppSettings,
    logger: RecordingLogger,
    handler: Handler,
    on_unauthorized: Callable[[], None] | None = None,
) -> HttpxTransport:
    return HttpxTransport(
        settings,
        logger=logger,
        on_unauthorized=on_unauthorized,
        http_transport=httpx.MockTransport(handler),
    )


def _meta(code: int, status: str, message: str) -> dict[str, object]:
    return {"code": code, "status": status, "message": message}


async def test_json_request_with_bearer_token(settings: AppSettings, logger: RecordingLogger) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"meta": _meta(200, "success", "Created"), "data": {"id": 1}})

    transport = _transport(settings, logger, handler)
    payload = await transport.request(
        RequestOptions(url=URL, method="POST", label="CREATE_OUTLET", body={"name": "A"}, token="tok")
    )

    assert payload["data"] == {"id": 1}
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"name": "A"}
    labels = [label for label, _ in logger.records]
    assert labels == ["[CREATE_OUTLET] Request:", "[CREATE_OUTLET] Response status:"]


async def test_no_authorization_header_without_token(
    settings: AppSettings, logger: RecordingLogger
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"meta": _meta(200, "success", "OK"), "data": []})

    await _transport(settings, logger, handler).request(
        RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
    )
    assert "Authorization" not in seen[0].headers
    assert seen[0].content == b""


async def test_form_body_is_sent_as_multipart(settings: AppSettings, logger: RecordingLogger) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"meta": _meta(200, "success", "OK"), "data": {"id": 4}})

    form = FormPayload(
        fields={"name": "Toko"},
        files=[UploadFile(field="photo", filename="front.jpg", content=b"JPEGDATA", content_type="image/jpeg")],
    )
    await _transport(settings, logger, handler).request(
        RequestOptions(url=f"{URL}/4", method="POST", label="UPDATE_OUTLET_FILE", body=form, token="tok")
    )

    request = seen[0]
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="name"' in request.content
    assert b"Toko" in request.content
    assert b'name="photo"; filename="front.jpg"' in request.content
    assert b"JPEGDATA" in request.content


async def test_unauthorized_with_token_overrides_message_and_fires_callback(
    settings: AppSettings, logger: RecordingLogger
) -> None:
    fired: list[bool] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"meta": _meta(401, "error", "Unauthenticated.")})

    transport = _transport(settings, logger, handler, on_unauthorized=lambda: fired.append(True))

    with pytest.raises(ApiRequestError) as excinfo:
        await transport.request(RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST", token="old"))

    assert excinfo.value.message == "Your session is invalid or has expired. Please log in again."
    assert excinfo.value.http_status == 401
    assert excinfo.value.code == 401
    assert fired == [True]


async def test_forbidden_message(settings: AppSettings, logger: RecordingLogger) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"meta": _meta(403, "error", "Forbidden")})

    with pytest.raises(ApiRequestError, match="You do not have permission"):
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST", token="tok")
        )


async def test_unauthenticated_request_keeps_server_message(
    settings: AppSettings, logger: RecordingLogger
) -> None:
    fired: list[bool] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"meta": _meta(401, "error", "Invalid credentials")})

    transport = _transport(settings, logger, handler, on_unauthorized=lambda: fired.append(True))

    with pytest.raises(ApiRequestError) as excinfo:
        await transport.request(
            RequestOptions(url="https://api.test/api/login", method="POST", label="LOGIN", body={})
        )

    assert excinfo.value.message == "Invalid credentials"
    assert fired == []


async def test_logout_does_not_fire_callback(settings: AppSettings, logger: RecordingLogger) -> None:
    fired: list[bool] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"meta": _meta(401, "error", "Unauthenticated.")})

    transport = _transport(settings, logger, handler, on_unauthorized=lambda: fired.append(True))

    with pytest.raises(ApiRequestError):
        await transport.request(
            RequestOptions(url="https://api.test/api/logout", method="POST", label="LOGOUT", token="tok")
        )
    assert fired == []


async def test_validation_errors_are_appended(settings: AppSettings, logger: RecordingLogger) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            422,
            json={
                "meta": _meta(422, "error", "The given data was invalid."),
                "errors": {"name": ["The name field is required."], "code": ["Too long."]},
            },
        )

    with pytest.raises(ApiRequestError) as excinfo:
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="POST", label="CREATE_OUTLET", body={}, token="tok")
        )

    err = excinfo.value
    assert err.message == "The given data was invalid.: The name field is required., Too long."
    assert err.http_status == 422
    assert err.errors == {"name": ["The name field is required."], "code": ["Too long."]}
    assert logger.records[-1][0] == "[CREATE_OUTLET] Failed:"


async def test_server_error_without_message_uses_generic_text(
    settings: AppSettings, logger: RecordingLogger
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"data": None})

    with pytest.raises(ApiRequestError) as excinfo:
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
        )
    assert excinfo.value.message == "Request failed"
    assert excinfo.value.code == 500


async def test_meta_error_on_2xx_is_a_failure(settings: AppSettings, logger: RecordingLogger) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"meta": _meta(200, "error", "Outlet locked")})

    with pytest.raises(ApiRequestError, match="Outlet locked"):
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="PUT", label="UPDATE_OUTLET", body={}, token="tok")
        )


async def test_timeout_maps_to_network_error(settings: AppSettings, logger: RecordingLogger) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ApiRequestError) as excinfo:
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
        )
    assert excinfo.value.message == "Request timeout"
    assert excinfo.value.code == 0
    assert excinfo.value.status == "network_error"


async def test_connection_failure_maps_to_network_error(
    settings: AppSettings, logger: RecordingLogger
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ApiRequestError) as excinfo:
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
        )
    assert excinfo.value.message.startswith("Cannot connect to the server")
    assert excinfo.value.status == "network_error"


async def test_non_json_body_is_invalid_response(settings: AppSettings, logger: RecordingLogger) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(ApiRequestError, match="Invalid response format"):
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
        )


async def test_messages_follow_configured_language(logger: RecordingLogger) -> None:
    settings = AppSettings(base_url="https://api.test/api", language="id")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ApiRequestError) as excinfo:
        await _transport(settings, logger, handler).request(
            RequestOptions(url=URL, method="GET", label="FETCH_OUTLET_LIST")
        )
    assert excinfo.value.message.startswith("Tidak dapat terhubung")
