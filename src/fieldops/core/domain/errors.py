"""Error taxonomy of the API layer.

Every failure an operation can hit (transport error, `meta.status == "error"`
body, programming error, plain string) is reduced here to one display-safe
message plus an `ErrorKind`, so the envelope never has to know where a
failure came from.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from fieldops.core.domain.language import Language
from fieldops.core.domain.models import ResponseMeta

_MESSAGES: dict[Language, dict[str, str]] = {
    Language.ENGLISH: {
        "failed_to": "Failed to {action}",
        "request_failed": "Request failed",
        "unauthorized": "Your session is invalid or has expired. Please log in again.",
        "forbidden": "You do not have permission to access this resource.",
        "timeout": "Request timeout",
        "network": "Cannot connect to the server. Check your internet connection.",
        "invalid_response": "Invalid response format",
        "missing_id": "An identifier is required for an update upload",
        "unexpected_id": "An identifier cannot be used with a create upload",
    },
    Language.INDONESIAN: {
        "failed_to": "Gagal {action}",
        "request_failed": "Request gagal",
        "unauthorized": "Token tidak valid atau telah kedaluwarsa. Silakan login kembali.",
        "forbidden": "Anda tidak memiliki izin untuk mengakses resource ini.",
        "timeout": "Request timeout",
        "network": "Tidak dapat terhubung ke server. Periksa koneksi internet Anda.",
        "invalid_response": "Format response tidak valid",
        "missing_id": "ID wajib diisi untuk upload mode update",
        "unexpected_id": "ID tidak boleh diisi untuk upload mode create",
    },
}


def message_for(key: str, language: Language = Language.ENGLISH, **params: Any) -> str:
    """Localized message template lookup."""

    table = _MESSAGES.get(language) or _MESSAGES[Language.ENGLISH]
    template = table.get(key) or _MESSAGES[Language.ENGLISH][key]
    return template.format(**params) if params else template


def fallback_message(operation: str, language: Language = Language.ENGLISH) -> str:
    """Default message for an operation whose failure carried no message.

    `FETCH_LIST` -> "Failed to fetch list".
    """

    action = operation.replace("_", " ").strip().lower() or "complete the request"
    return message_for("failed_to", language, action=action)


class ErrorKind(str, Enum):
    """Where a display message was found, in detection order."""

    TRANSPORT = "transport"
    META = "meta"
    EXCEPTION = "exception"
    TEXT = "text"
    UNKNOWN = "unknown"


class ApiRequestError(Exception):
    """Raised by the transport on non-2xx responses or network failures."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        status: str = "error",
        http_status: int | None = None,
        errors: Any = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.http_status = http_status
        self.errors = errors
        self.data = data


class ResponseStatusError(Exception):
    """A 2xx response whose body reports `meta.status == "error"`."""

    def __init__(self, meta: ResponseMeta) -> None:
        super().__init__(meta.message or "")
        self.meta = meta


def flatten_field_errors(errors: Any) -> str:
    """Join validation errors (`{"field": ["msg", ...]}`) into one line."""

    if isinstance(errors, Mapping):
        values: list[Any] = list(errors.values())
    elif isinstance(errors, (list, tuple)):
        values = list(errors)
    else:
        return ""

    parts: list[str] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            parts.extend(str(v) for v in value if str(v).strip())
        elif isinstance(value, str) and value.strip():
            parts.append(value)
    return ", ".join(parts)


def _text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _meta_message(error: object) -> str | None:
    meta = error.get("meta") if isinstance(error, Mapping) else getattr(error, "meta", None)
    if isinstance(meta, Mapping):
        return _text(meta.get("message"))
    return _text(getattr(meta, "message", None))


def describe_failure(error: object, *, fallback: str) -> tuple[ErrorKind, str]:
    """Map any failure to `(kind, display message)`.

    Detection order:
    1. transport errors / objects carrying a `message`
    2. message nested under `meta.message`
    3. any other exception with a non-empty text
    4. plain strings
    5. `fallback`
    """

    if isinstance(error, Mapping):
        message = _text(error.get("message"))
    else:
        message = _text(getattr(error, "message", None))
    if message:
        return ErrorKind.TRANSPORT, message

    message = _meta_message(error)
    if message:
        return ErrorKind.META, message

    if isinstance(error, BaseException):
        message = _text(str(error))
        if message:
            return ErrorKind.EXCEPTION, message
    elif isinstance(error, str) and error.strip():
        return ErrorKind.TEXT, error

    return ErrorKind.UNKNOWN, fallback
