"""httpx wrapper and the concrete transport of the API layer.

Why a wrapper:
- Standardizes timeouts, headers and logging for every request.
- Maps every HTTP/network failure to `ApiRequestError` with a message that
  is safe to show to a user.
- Easy to test: pass an `httpx.MockTransport` as `http_transport`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from fieldops.core.config import AppSettings
from fieldops.core.domain.errors import ApiRequestError, flatten_field_errors, message_for
from fieldops.core.domain.models import FormPayload
from fieldops.core.interfaces.transport import Logger, RequestOptions
from fieldops.core.logger import AppLogger


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    timeout_seconds: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the application defaults."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds or settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def _multipart(form: FormPayload) -> dict[str, Any]:
    files = [
        (part.field, (part.filename, part.content, part.content_type))
        for part in form.files
    ]
    return {"data": dict(form.fields), "files": files or None}


class HttpxTransport:
    """`Transport` implementation on top of `httpx.AsyncClient`.

    A response is a success when the HTTP status is 2xx and the body does not
    report `meta.status == "error"`. `on_unauthorized` fires on 401/403 for
    authenticated requests other than logout.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        logger: Logger | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._logger = logger or AppLogger()
        self._on_unauthorized = on_unauthorized
        self._http_transport = http_transport

    async def request(self, options: RequestOptions) -> dict[str, Any]:
        label = options.label
        language = self._settings.language
        is_form = isinstance(options.body, FormPayload)

        headers: dict[str, str] = {}
        if options.token:
            headers["Authorization"] = f"Bearer {options.token}"

        kwargs: dict[str, Any] = {}
        if isinstance(options.body, FormPayload):
            kwargs.update(_multipart(options.body))
            timeout = self._settings.upload_timeout_seconds
        else:
            if options.body is not None:
                kwargs["json"] = options.body
            timeout = self._settings.http_timeout_seconds

        self._logger.log(
            f"[{label}] Request:",
            {
                "url": options.url,
                "method": options.method,
                "body_type": "form" if is_form else ("json" if options.body is not None else "none"),
            },
        )

        try:
            async with build_async_client(
                self._settings,
                timeout_seconds=timeout,
                transport=self._http_transport,
            ) as client:
                response = await client.request(
                    options.method, options.url, headers=headers, **kwargs
                )
        except httpx.TimeoutException as exc:
            self._logger.log(f"[{label}] Timeout", {"url": options.url, "error": str(exc)})
            raise ApiRequestError(
                message_for("timeout", language), code=0, status="network_error"
            ) from exc
        except httpx.HTTPError as exc:
            self._logger.log(f"[{label}] Network error", {"url": options.url, "error": str(exc)})
            raise ApiRequestError(
                message_for("network", language), code=0, status="network_error"
            ) from exc

        self._logger.log(f"[{label}] Response status:", response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiRequestError(
                message_for("invalid_response", language),
                code=response.status_code,
                http_status=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise ApiRequestError(
                message_for("invalid_response", language),
                code=response.status_code,
                http_status=response.status_code,
            )

        meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
        if response.is_success and meta.get("status") != "error":
            return payload

        raise self._failure(options, response.status_code, payload, meta)

    def _failure(
        self,
        options: RequestOptions,
        http_status: int,
        payload: dict[str, Any],
        meta: dict[str, Any],
    ) -> ApiRequestError:
        language = self._settings.language
        errors = payload.get("errors")
        message = meta.get("message") or message_for("request_failed", language)

        authenticated = bool(options.token)
        is_logout = options.label == "LOGOUT" or options.url.rstrip("/").endswith(
            self._settings.logout_path.rstrip("/")
        )

        if authenticated and http_status in (401, 403):
            message = message_for("unauthorized" if http_status == 401 else "forbidden", language)
            if self._on_unauthorized is not None and not is_logout:
                self._logger.log(f"[{options.label}] Unauthorized, session callback triggered")
                self._on_unauthorized()
        elif errors:
            details = flatten_field_errors(errors)
            if details:
                message = f"{message}: {details}"

        self._logger.log(
            f"[{options.label}] Failed:",
            {
                "http_status": http_status,
                "meta_code": meta.get("code"),
                "meta_status": meta.get("status"),
                "message": message,
                "errors": errors,
            },
        )
        return ApiRequestError(
            message,
            code=meta.get("code") or http_status,
            status=meta.get("status") or "error",
            http_status=http_status,
            errors=errors,
            data=payload.get("data"),
        )
