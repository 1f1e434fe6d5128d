"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from fieldops.adapters.http_client import build_async_client
from fieldops.adapters.token_store import FileTokenStore
from fieldops.core.config import AppSettings, get_user_env_file, write_user_env_vars
from fieldops.core.domain.language import Language

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str) -> tuple[bool, str]:
    try:
        async with build_async_client() as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="fieldops Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Base URL", "OK", settings.base_url)
    table.add_row("Language", "OK", settings.language.label())

    if settings.api_token:
        table.add_row("Token", "OK", "FIELDOPS_API_TOKEN set")
    elif FileTokenStore()():
        table.add_row("Token", "OK", "Stored by `fieldops login`")
    else:
        table.add_row("Token", "MISSING", "Run `fieldops login` or `fieldops otp verify`")

    ok_http, detail_http = asyncio.run(_check_http(settings.base_url))
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            f"\n[yellow]Note:[/yellow] set FIELDOPS_BASE_URL or run `fieldops doctor setup` "
            f"(user config: {get_user_env_file()})."
        )


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()
    base_url = typer.prompt("API base URL", default=settings.base_url, show_default=True).strip()
    language = typer.prompt(
        "Message language (en/id)", default=settings.language.value, show_default=True
    ).strip().lower()

    if not base_url:
        raise typer.BadParameter("base URL is required")
    try:
        Language(language)
    except ValueError:
        raise typer.BadParameter("language must be 'en' or 'id'") from None

    env_path = write_user_env_vars(
        {
            "FIELDOPS_BASE_URL": base_url,
            "FIELDOPS_LANGUAGE": language,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
