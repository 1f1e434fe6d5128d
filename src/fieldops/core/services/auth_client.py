"""Authentication operations.

Login and OTP calls share the envelope pattern of the resource clients but
hold no list/item state: each call is independent. Persisting the returned
token is the caller's responsibility (see `adapters.token_store`).
"""

from __future__ import annotations

from typing import Any

from fieldops.core.config import AppSettings
from fieldops.core.domain.models import ApiResult, ResponseBody
from fieldops.core.interfaces.transport import HttpMethod, Logger, RequestOptions, TokenProvider, Transport
from fieldops.core.services.envelope import OperationEnvelope, parse_body


def _no_token() -> str | None:
    return None


class AuthClient:
    """Login / OTP / profile / logout against the configured auth endpoints."""

    def __init__(
        self,
        *,
        transport: Transport,
        logger: Logger,
        token_provider: TokenProvider | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._token_provider = token_provider or _no_token
        self._envelope = OperationEnvelope(
            "auth", logger=logger, language=self._settings.language
        )

    async def login(
        self, username: str, password: str, notification_id: str
    ) -> ApiResult[dict[str, Any]]:
        body = {
            "version": self._settings.client_version,
            "username": username,
            "password": password,
            "notif_id": notification_id,
        }
        return await self._envelope.run(
            lambda: self._call(self._settings.login_path, "POST", "LOGIN", body),
            "LOGIN",
        )

    async def request_otp(self, phone: str) -> ApiResult[dict[str, Any]]:
        return await self._envelope.run(
            lambda: self._call(
                self._settings.request_otp_path, "POST", "REQUEST_OTP", {"phone": phone}
            ),
            "REQUEST_OTP",
        )

    async def verify_otp(
        self, phone: str, otp: str, notification_id: str
    ) -> ApiResult[dict[str, Any]]:
        body = {"phone": phone, "otp": otp, "notif_id": notification_id}
        return await self._envelope.run(
            lambda: self._call(self._settings.verify_otp_path, "POST", "VERIFY_OTP", body),
            "VERIFY_OTP",
        )

    async def get_profile(self) -> ApiResult[dict[str, Any]]:
        return await self._envelope.run(
            lambda: self._call(
                self._settings.profile_path, "GET", "GET_PROFILE", None, authenticated=True
            ),
            "GET_PROFILE",
        )

    async def logout(self) -> ApiResult[Any]:
        return await self._envelope.run(
            lambda: self._call(
                self._settings.logout_path, "POST", "LOGOUT", None, authenticated=True
            ),
            "LOGOUT",
        )

    async def _call(
        self,
        path: str,
        method: HttpMethod,
        label: str,
        body: dict[str, Any] | None,
        *,
        authenticated: bool = False,
    ) -> ResponseBody:
        options = RequestOptions(
            url=self._settings.endpoint(path),
            method=method,
            label=label,
            body=body,
            token=self._token_provider() if authenticated else None,
        )
        raw = await self._transport.request(options)
        return parse_body(raw, self._settings.language)
