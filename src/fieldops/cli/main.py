"""fieldops command line.

Thin front-end over the API layer: every command builds the clients, runs
one operation with `asyncio.run`, renders the `ApiResult` and exits non-zero
on failure. No command catches exceptions from the clients; they never raise.
"""

from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from fieldops.adapters.json_exporter import export_entities_json
from fieldops.adapters.token_store import FileTokenStore, StaticTokenProvider
from fieldops.cli import doctor
from fieldops.cli.ui_components import (
    build_entities_table,
    build_result_panel,
    format_page_info,
    print_banner,
)
from fieldops.core.config import AppSettings
from fieldops.core.domain.models import ApiResult, AuthSession, FormPayload, UploadFile
from fieldops.core.logger import AppLogger, setup_logger
from fieldops.core.services.registry import FieldOpsClients, build_clients

app = typer.Typer(no_args_is_help=True, help="Field operations API client (outlets, visits, plan visits).")
otp_app = typer.Typer(no_args_is_help=True, help="Login with a one-time password.")
app.add_typer(otp_app, name="otp")
app.add_typer(doctor.app, name="doctor")

_console = Console()

_DEFAULT_NOTIF_ID = "fieldops-cli"


def parse_pairs(values: list[str] | None) -> dict[str, str]:
    """`["a=1", "b=x"]` -> `{"a": "1", "b": "x"}`."""

    out: dict[str, str] = {}
    for raw in values or []:
        if "=" not in raw:
            raise typer.BadParameter(f"expected key=value, got '{raw}'")
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"empty key in '{raw}'")
        out[key] = value.strip()
    return out


def _token_store() -> FileTokenStore:
    return FileTokenStore()


def _clients() -> FieldOpsClients:
    settings = AppSettings()
    logger = setup_logger(level=settings.log_level, log_file=settings.log_file)
    if settings.api_token:
        token_provider: Any = StaticTokenProvider(settings.api_token)
    else:
        token_provider = _token_store()
    return build_clients(settings, token_provider=token_provider, logger=AppLogger(logger))


def _resource(name: str) -> Any:
    try:
        return _clients().resource(name)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0])) from None


def _finish(title: str, result: ApiResult[Any]) -> None:
    _console.print(build_result_panel(title, result))
    if not result.success:
        raise typer.Exit(code=1)


def _store_session(result: ApiResult[Any]) -> None:
    if not result.success or not isinstance(result.data, dict):
        return
    try:
        session = AuthSession.model_validate(result.data)
    except ValidationError:
        _console.print("[red]Login response did not contain an access token.[/red]")
        raise typer.Exit(code=1) from None
    path = _token_store().save(session.access_token)
    name = session.user.get("name") or session.user.get("username") or "user"
    _console.print(f"[green]Logged in as[/green] {name} [dim](token saved to {path})[/dim]")
    if session.permissions:
        _console.print(f"[dim]Permissions: {', '.join(session.permissions)}[/dim]")


@app.command()
def login(
    username: str = typer.Argument(..., help="Account username."),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    notif_id: str = typer.Option(_DEFAULT_NOTIF_ID, "--notif-id", help="Device notification id."),
) -> None:
    """Log in with username/password and store the access token."""

    clients = _clients()
    result = asyncio.run(clients.auth.login(username, password, notif_id))
    if not result.success:
        _finish("Login", result)
    _store_session(result)


@otp_app.command("request")
def otp_request(phone: str = typer.Argument(..., help="Registered phone number.")) -> None:
    """Ask the backend to send an OTP to `phone`."""

    clients = _clients()
    _finish("Request OTP", asyncio.run(clients.auth.request_otp(phone)))


@otp_app.command("verify")
def otp_verify(
    phone: str = typer.Argument(...),
    otp: str = typer.Argument(...),
    notif_id: str = typer.Option(_DEFAULT_NOTIF_ID, "--notif-id", help="Device notification id."),
) -> None:
    """Verify an OTP and store the access token."""

    clients = _clients()
    result = asyncio.run(clients.auth.verify_otp(phone, otp, notif_id))
    if not result.success:
        _finish("Verify OTP", result)
    _store_session(result)


@app.command()
def profile() -> None:
    """Show the profile of the logged-in user."""

    clients = _clients()
    _finish("Profile", asyncio.run(clients.auth.get_profile()))


@app.command()
def logout() -> None:
    """Log out on the server (best effort) and forget the stored token."""

    clients = _clients()
    result = asyncio.run(clients.auth.logout())
    _token_store().clear()
    if result.success:
        _console.print("[green]Logged out.[/green]")
    else:
        _console.print(f"[yellow]Server logout failed:[/yellow] {result.error}. Local token removed.")


@app.command("list")
def list_entities(
    resource: str = typer.Argument(..., help="outlet, user, visit, planvisit, notification"),
    filters: Optional[list[str]] = typer.Option(None, "--filter", "-f", help="key=value, repeatable."),
    page: Optional[int] = typer.Option(None, "--page"),
    per_page: Optional[int] = typer.Option(None, "--per-page"),
    search: Optional[str] = typer.Option(None, "--search"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the list to a JSON file."),
    banner: bool = typer.Option(False, "--banner", help="Print the banner first."),
) -> None:
    """List entities of a resource."""

    if banner:
        print_banner(_console)
    query: dict[str, Any] = {"page": page, "per_page": per_page, "search": search}
    query.update(parse_pairs(filters))

    client = _resource(resource)
    result = asyncio.run(client.fetch_list(query))
    if not result.success:
        _finish(f"List {client.name}", result)

    _console.print(build_entities_table(f"{client.name} list", client.collection))
    summary = format_page_info(client.page_info)
    if summary:
        _console.print(f"[dim]{summary}[/dim]")
    if output is not None:
        path = export_entities_json(
            entities=client.collection, output_path=output, page_info=client.page_info
        )
        _console.print(f"[green]Saved:[/green] {path}")


@app.command("get")
def get_entity(resource: str = typer.Argument(...), identifier: str = typer.Argument(...)) -> None:
    """Show one entity."""

    client = _resource(resource)
    _finish(f"{client.name} {identifier}", asyncio.run(client.fetch_item(identifier)))


@app.command("create")
def create_entity(
    resource: str = typer.Argument(...),
    fields: Optional[list[str]] = typer.Option(None, "--field", "-F", help="key=value, repeatable."),
) -> None:
    """Create an entity from key=value fields."""

    client = _resource(resource)
    _finish(f"Create {client.name}", asyncio.run(client.create_item(parse_pairs(fields))))


@app.command("update")
def update_entity(
    resource: str = typer.Argument(...),
    identifier: str = typer.Argument(...),
    fields: Optional[list[str]] = typer.Option(None, "--field", "-F", help="key=value, repeatable."),
) -> None:
    """Update an entity with key=value fields."""

    client = _resource(resource)
    _finish(
        f"Update {client.name} {identifier}",
        asyncio.run(client.update_item(identifier, parse_pairs(fields))),
    )


@app.command("delete")
def delete_entity(
    resource: str = typer.Argument(...),
    identifier: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete an entity."""

    if not yes:
        typer.confirm(f"Delete {resource} {identifier}?", abort=True)
    client = _resource(resource)
    _finish(f"Delete {client.name} {identifier}", asyncio.run(client.delete_item(identifier)))


@app.command("upload")
def upload(
    resource: str = typer.Argument(...),
    identifier: Optional[str] = typer.Argument(None, help="Entity id (required for --mode update)."),
    files: Optional[list[str]] = typer.Option(None, "--file", help="field=path, repeatable."),
    fields: Optional[list[str]] = typer.Option(None, "--field", "-F", help="key=value, repeatable."),
    mode: str = typer.Option("update", "--mode", help="create or update."),
) -> None:
    """Send a multipart form (photos, videos) to a resource."""

    if mode not in ("create", "update"):
        raise typer.BadParameter("mode must be 'create' or 'update'")

    parts: list[UploadFile] = []
    for field_name, raw_path in parse_pairs(files).items():
        path = Path(raw_path)
        if not path.is_file():
            raise typer.BadParameter(f"file not found: {path}")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        parts.append(
            UploadFile(
                field=field_name,
                filename=path.name,
                content=path.read_bytes(),
                content_type=content_type,
            )
        )

    form = FormPayload(fields=parse_pairs(fields), files=parts)
    client = _resource(resource)
    result = asyncio.run(client.upload_file(identifier, form, mode))  # type: ignore[arg-type]
    _finish(f"Upload {client.name}", result)


def run() -> None:
    app()
