"""CLI UI components (Rich).

Keeps table/panel layout out of the command functions so every command
renders entities and results the same way.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fieldops.core.domain.models import ApiResult, Entity, PageInfo

_MAX_COLUMNS = 6


def print_banner(console: Console) -> None:
    title = Text("FIELDOPS", style="bold cyan")
    subtitle = Text("Outlets • Visits • Plan visits", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get("name") or value.get("id") or value)
    return str(value)


def build_entities_table(title: str, entities: Sequence[Entity]) -> Table:
    """Table with `id` first, then the first populated attributes seen."""

    columns: list[str] = ["id"]
    for entity in entities:
        for key, value in entity.model_dump().items():
            if key in columns or value in (None, "", {}, []):
                continue
            if len(columns) >= _MAX_COLUMNS:
                break
            columns.append(key)

    table = Table(title=title)
    for i, column in enumerate(columns):
        table.add_column(column, style="cyan" if i == 0 else "white", no_wrap=i == 0)
    for entity in entities:
        data = entity.model_dump()
        table.add_row(*(_cell(data.get(column)) for column in columns))
    return table


def format_page_info(page_info: PageInfo | None) -> str:
    if page_info is None:
        return ""
    return (
        f"Page {page_info.current_page}/{page_info.last_page} "
        f"• {page_info.total} total • {page_info.per_page} per page"
    )


def build_result_panel(title: str, result: ApiResult[Any]) -> Panel:
    """Panel for a single-operation result (success data or error message)."""

    if not result.success:
        return Panel(Text(result.error or "", style="red"), title=title, border_style="red")

    body = Text()
    if result.meta and result.meta.message:
        body.append(result.meta.message + "\n", style="bold")
    data = result.data
    if isinstance(data, Entity):
        data = data.model_dump()
    if isinstance(data, dict):
        for key, value in data.items():
            body.append(f"{key}: ", style="cyan")
            body.append(f"{_cell(value)}\n")
    elif data is not None:
        body.append(str(data))
    return Panel(body, title=title, border_style="green")
