"""Generic REST resource client.

One `ResourceClient` binds a resource name and base path to list / get /
create / update / delete / upload operations that share one `ClientState`.

Rules:
- Every operation goes through the `OperationEnvelope` and returns an
  `ApiResult`; nothing raises to the caller.
- Every successful mutation re-fetches the full list (no local patching);
  the mutation settles before the refresh starts.
- Identifiers are percent-encoded when interpolated into the URL.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from typing import Any, Generic, Literal, TypeVar, Union
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ValidationError

from fieldops.core.config import AppSettings
from fieldops.core.domain.errors import ApiRequestError, message_for
from fieldops.core.domain.models import ApiResult, Entity, FormPayload, PageInfo, ResponseBody
from fieldops.core.interfaces.transport import HttpMethod, Logger, RequestOptions, TokenProvider, Transport
from fieldops.core.services.envelope import ClientState, OperationEnvelope, parse_body

EntityT = TypeVar("EntityT", bound=Entity)

FilterScalar = Union[str, int, float, bool, None]
FilterValue = Union[FilterScalar, Sequence[FilterScalar], Set[FilterScalar], Mapping[str, Any]]
Filters = Mapping[str, FilterValue]

UploadMode = Literal["create", "update"]
Payload = Union[Mapping[str, Any], BaseModel]


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _encode_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _append_filter(pairs: list[tuple[str, str]], key: str, value: object) -> None:
    if _is_blank(value):
        return
    if isinstance(value, Mapping):
        for sub_key, inner in value.items():
            _append_filter(pairs, f"{key}[{sub_key}]", inner)
        return
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    if isinstance(value, (list, tuple)):
        for item in value:
            if not _is_blank(item):
                pairs.append((f"{key}[]", _encode_scalar(item)))
        return
    pairs.append((key, _encode_scalar(value)))


def build_query(filters: Filters | None) -> str:
    """Serialize filters into a query string.

    None and "" are dropped; falsy-but-defined values (0, False) are kept.
    Sequences become repeated `key[]` pairs and nested mappings `key[sub]`
    pairs, in insertion order. Sets are sorted first so the query is stable.
    """

    pairs: list[tuple[str, str]] = []
    for key, value in (filters or {}).items():
        _append_filter(pairs, key, value)
    return urlencode(pairs)


def _same_id(left: str | int, right: str | int) -> bool:
    return str(left) == str(right)


class ResourceClient(Generic[EntityT]):
    """CRUD + list + upload client for one REST resource."""

    def __init__(
        self,
        model: type[EntityT],
        *,
        name: str,
        path: str,
        transport: Transport,
        token_provider: TokenProvider,
        logger: Logger,
        settings: AppSettings | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._model = model
        self._name = name
        self._path = path
        self._transport = transport
        self._token_provider = token_provider
        self._state: ClientState[EntityT] = ClientState()
        self._envelope = OperationEnvelope(
            name,
            logger=logger,
            state=self._state,
            language=self._settings.language,
        )

    # State

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return self._path

    @property
    def collection(self) -> list[EntityT]:
        return list(self._state.collection)

    @property
    def selected(self) -> EntityT | None:
        return self._state.selected

    @property
    def pending(self) -> bool:
        return self._state.pending

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def page_info(self) -> PageInfo | None:
        return self._state.page_info

    def reset(self) -> None:
        """Drop collection, selection, error and pagination."""

        self._state.collection = []
        self._state.selected = None
        self._state.last_error = None
        self._state.page_info = None

    # Operations

    async def fetch_list(self, filters: Filters | None = None) -> ApiResult[list[EntityT]]:
        return await self._envelope.run(
            lambda: self._load_list(filters),
            "FETCH_LIST",
            self._apply_list,
        )

    async def fetch_item(self, identifier: str | int) -> ApiResult[EntityT]:
        async def operation() -> ResponseBody:
            body = await self._send(
                self._url(identifier), "GET", label=self._label("FETCH", "ITEM")
            )
            body.data = self._parse_entity(body.data)
            return body

        return await self._envelope.run(operation, "FETCH_ITEM", self._select)

    async def create_item(self, payload: Payload) -> ApiResult[EntityT]:
        async def operation() -> ResponseBody:
            body = await self._send(
                self._url(), "POST", label=self._label("CREATE"), body=self._serialize(payload)
            )
            body.data = self._parse_entity(body.data)
            await self._refresh()
            return body

        return await self._envelope.run(operation, "CREATE")

    async def update_item(self, identifier: str | int, payload: Payload) -> ApiResult[EntityT]:
        async def operation() -> ResponseBody:
            body = await self._send(
                self._url(identifier),
                "PUT",
                label=self._label("UPDATE"),
                body=self._serialize(payload),
            )
            body.data = self._parse_entity(body.data)
            await self._refresh()
            return body

        return await self._envelope.run(operation, "UPDATE", self._select)

    async def delete_item(self, identifier: str | int) -> ApiResult[Any]:
        async def operation() -> ResponseBody:
            body = await self._send(self._url(identifier), "DELETE", label=self._label("DELETE"))
            await self._refresh()
            return body

        def forget_selected(_: ResponseBody) -> None:
            current = self._state.selected
            if current is not None and _same_id(current.id, identifier):
                self._state.selected = None

        return await self._envelope.run(operation, "DELETE", forget_selected)

    async def upload_file(
        self,
        identifier: str | int | None,
        form: FormPayload,
        mode: UploadMode = "update",
    ) -> ApiResult[EntityT]:
        tag = mode.upper()

        async def operation() -> ResponseBody:
            if mode == "update":
                if identifier is None or _is_blank(identifier):
                    raise ApiRequestError(message_for("missing_id", self._settings.language))
                url = self._url(identifier)
            else:
                if not _is_blank(identifier):
                    raise ApiRequestError(message_for("unexpected_id", self._settings.language))
                url = self._url()
            body = await self._send(
                url, "POST", label=f"{tag}_{self._name.upper()}_FILE", body=form
            )
            body.data = self._parse_entity(body.data)
            await self._refresh()
            return body

        on_success = self._select if mode == "update" else None
        return await self._envelope.run(operation, f"{tag}_FILE", on_success)

    # Internals

    async def _load_list(self, filters: Filters | None = None) -> ResponseBody:
        query = build_query(filters)
        url = self._url() + (f"?{query}" if query else "")
        body = await self._send(url, "GET", label=self._label("FETCH", "LIST"))
        items = body.data if body.data is not None else []
        if not isinstance(items, list):
            raise ApiRequestError(message_for("invalid_response", self._settings.language))
        body.data = [self._validate(item) for item in items]
        return body

    async def _refresh(self) -> None:
        self._apply_list(await self._load_list())

    def _apply_list(self, body: ResponseBody) -> None:
        self._state.collection = list(body.data or [])
        self._state.page_info = body.meta.page_info()

    def _select(self, body: ResponseBody) -> None:
        self._state.selected = body.data

    async def _send(
        self,
        url: str,
        method: HttpMethod,
        *,
        label: str,
        body: dict[str, Any] | FormPayload | None = None,
    ) -> ResponseBody:
        options = RequestOptions(
            url=url,
            method=method,
            label=label,
            body=body,
            token=self._token_provider(),
        )
        raw = await self._transport.request(options)
        return parse_body(raw, self._settings.language)

    def _url(self, identifier: str | int | None = None) -> str:
        base = self._settings.endpoint(self._path)
        if identifier is None:
            return base
        return f"{base}/{quote(str(identifier), safe='')}"

    def _label(self, action: str, suffix: str | None = None) -> str:
        parts = [action, self._name.upper()]
        if suffix:
            parts.append(suffix)
        return "_".join(parts)

    def _parse_entity(self, data: Any) -> EntityT | None:
        if data is None:
            return None
        return self._validate(data)

    def _validate(self, data: Any) -> EntityT:
        try:
            return self._model.model_validate(data)
        except ValidationError as exc:
            raise ApiRequestError(
                message_for("invalid_response", self._settings.language)
            ) from exc

    @staticmethod
    def _serialize(payload: Payload) -> dict[str, Any]:
        if isinstance(payload, BaseModel):
            return payload.model_dump(mode="json", exclude_unset=True)
        return dict(payload)
