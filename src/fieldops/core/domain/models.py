"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Entities coming from the backend are validated once, at the edge, and keep
  any extra attributes the core does not know about.
- The response envelope (`meta` / `data` / `errors`) and the operation result
  are described once and shared by every resource client.

Note:
- These models describe *what* the data is, not *how* it is fetched.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Entity(BaseModel):
    """Any REST resource addressable by a unique identifier.

    Attributes beyond `id` are resource specific and kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: str | int = Field(
        ...,
        description="Unique identifier (string or integer) of the entity.",
    )


class Outlet(Entity):
    code: str | None = None
    name: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    address: str | None = None
    location: str | None = None
    district: str | None = None
    status: str | None = None
    radius: float | None = None


class User(Entity):
    name: str | None = None
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    photo: str | None = None
    role: dict[str, Any] | None = None


class Visit(Entity):
    visit_date: str | None = None
    checkin_time: str | None = None
    checkout_time: str | None = None
    type: str | None = None
    duration: int | None = None
    outlet: dict[str, Any] | None = None
    user: dict[str, Any] | None = None


class PlanVisit(Entity):
    user_id: int | None = None
    outlet_id: int | None = None
    visit_date: str | None = None
    type: str | None = None
    outlet: dict[str, Any] | None = None


class Notification(Entity):
    title: str | None = None
    body: str | None = None
    read_at: str | None = None


class PageInfo(BaseModel):
    """Pagination descriptor taken from a list response's `meta`."""

    current_page: int = Field(..., ge=0)
    last_page: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    per_page: int = Field(..., ge=0)


class ResponseMeta(BaseModel):
    """The `meta` block the backend attaches to every response."""

    model_config = ConfigDict(extra="allow")

    code: int | None = None
    status: str | None = None
    message: str | None = None
    current_page: int | None = None
    last_page: int | None = None
    total: int | None = None
    per_page: int | None = None

    def page_info(self) -> PageInfo | None:
        """Return pagination info, or None when the response is not paginated."""

        values = (self.current_page, self.last_page, self.total, self.per_page)
        if any(v is None for v in values):
            return None
        return PageInfo(
            current_page=self.current_page,
            last_page=self.last_page,
            total=self.total,
            per_page=self.per_page,
        )


class ResponseBody(BaseModel):
    """Parsed response body: `{"meta": {...}, "data": ..., "errors"?: {...}}`."""

    model_config = ConfigDict(extra="allow")

    data: Any = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)
    errors: Any = None


class UploadFile(BaseModel):
    """One file part of a multipart upload."""

    field: str = Field(..., min_length=1, description="Form field name (e.g. 'photo').")
    filename: str = Field(..., min_length=1)
    content: bytes
    content_type: str = Field(default="application/octet-stream")


class FormPayload(BaseModel):
    """Multipart form body: plain fields plus file parts."""

    fields: dict[str, str] = Field(default_factory=dict)
    files: list[UploadFile] = Field(default_factory=list)


T = TypeVar("T")


class ApiResult(BaseModel, Generic[T]):
    """Discriminated result returned by every operation.

    `success=True` carries `data` (and the response `meta`); `success=False`
    carries a display-safe `error` message.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    meta: ResponseMeta | None = None


class AuthSession(BaseModel):
    """Credential payload returned by login / OTP verification."""

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(..., min_length=1)
    token_type: str | None = None
    user: dict[str, Any] = Field(default_factory=dict)

    @property
    def permissions(self) -> list[str]:
        """Permission names granted through the user's role."""

        role = self.user.get("role")
        if not isinstance(role, dict):
            return []
        out: list[str] = []
        for perm in role.get("permissions") or []:
            if isinstance(perm, dict) and isinstance(perm.get("name"), str):
                out.append(perm["name"])
        return out
