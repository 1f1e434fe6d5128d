"""
Tests for failure -> display message mapping.
"""

from __future__ import annotations

from fieldops.core.domain.errors import (
    ApiRequestError,
    ErrorKind,
    ResponseStatusError,
    describe_failure,
    fallback_message,
    flatten_field_errors,
)
from fieldops.core.domain.language import Language
from fieldops.core.domain.models import ResponseMeta

FALLBACK = "Failed to fetch list"


def test_transport_error_message_is_used_verbatim() -> None:
    kind, message = describe_failure(ApiRequestError("Invalid credentials"), fallback=FALLBACK)
    assert kind is ErrorKind.TRANSPORT
    assert message == "Invalid credentials"


def test_mapping_with_message_counts_as_transport_error() -> None:
    assert describe_failure({"message": "Bad"}, fallback=FALLBACK) == (ErrorKind.TRANSPORT, "Bad")


def test_meta_message() -> None:
    err = ResponseStatusError(ResponseMeta(status="error", message="Outlet locked"))
    assert describe_failure(err, fallback=FALLBACK) == (ErrorKind.META, "Outlet locked")
    body = {"meta": {"status": "error", "message": "Nested"}}
    assert describe_failure(body, fallback=FALLBACK) == (ErrorKind.META, "Nested")


def test_generic_exception() -> None:
    kind, message = describe_failure(RuntimeError("boom"), fallback=FALLBACK)
    assert kind is ErrorKind.EXCEPTION
    assert message == "boom"


def test_plain_string() -> None:
    assert describe_failure("offline", fallback=FALLBACK) == (ErrorKind.TEXT, "offline")


def test_opaque_failures_fall_back() -> None:
    assert describe_failure(RuntimeError(), fallback=FALLBACK) == (ErrorKind.UNKNOWN, FALLBACK)
    assert describe_failure(42, fallback=FALLBACK) == (ErrorKind.UNKNOWN, FALLBACK)
    assert describe_failure(None, fallback=FALLBACK) == (ErrorKind.UNKNOWN, FALLBACK)
    assert describe_failure("   ", fallback=FALLBACK) == (ErrorKind.UNKNOWN, FALLBACK)


def test_fallback_message_is_localized() -> None:
    assert fallback_message("FETCH_LIST") == "Failed to fetch list"
    assert fallback_message("CREATE", Language.INDONESIAN) == "Gagal create"


def test_flatten_field_errors() -> None:
    errors = {"name": ["The name field is required."], "code": ["Too long.", "Invalid."]}
    assert flatten_field_errors(errors) == "The name field is required., Too long., Invalid."
    assert flatten_field_errors(None) == ""
    assert flatten_field_errors(["a", "b"]) == "a, b"
