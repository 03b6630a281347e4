from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .results import CommandResult


@dataclass(frozen=True, slots=True)
class RenderSettings:
    output: str  # "table" | "json"
    quiet: bool
    verbosity: int


def _error_title(error_type: str) -> str:
    mapping = {
        "usage_error": "Usage error",
        "validation_error": "Invalid query",
        "config_error": "Configuration error",
        "file_exists": "File exists",
        "internal_error": "Internal error",
    }
    return mapping.get((error_type or "").strip(), "Error")


def _render_error_details(
    *,
    stderr: Console,
    command: str,
    error_type: str,
    hint: str | None,
    details: dict[str, Any] | None,
    settings: RenderSettings,
) -> None:
    if settings.quiet:
        return

    if hint:
        stderr.print(Text(f"Hint: {hint}"))
    elif error_type == "usage_error":
        stderr.print(Text(f"Hint: run `nowquery {command} --help`"))

    if not details:
        return

    if error_type == "validation_error":
        index = details.get("index")
        clause = details.get("clause")
        if index is not None:
            stderr.print(Text(f"Clause #{index}: {json.dumps(clause, ensure_ascii=False)}"))
        if settings.verbosity >= 1:
            stderr.print(Panel.fit(Text(json.dumps(details, ensure_ascii=False, indent=2))))
        return

    if settings.verbosity >= 2:
        stderr.print(Panel.fit(Text(json.dumps(details, ensure_ascii=False, indent=2))))


def _table_from_rows(rows: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold")
    if not rows:
        table.add_column("result")
        table.add_row("No results")
        return table
    columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*["" if row.get(col) is None else str(row.get(col)) for col in columns])
    return table


def _kv_table(obj: dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("field")
    table.add_column("value")
    for k, v in obj.items():
        table.add_row(str(k), "" if v is None else str(v))
    return table


def _render_human_data(data: Any) -> Any:
    if isinstance(data, list) and all(isinstance(r, dict) for r in data):
        return _table_from_rows(data)
    if isinstance(data, dict):
        return _kv_table(data)
    return Panel.fit(Text(str(data) if data is not None else "OK"))


def render_result(result: CommandResult, *, settings: RenderSettings) -> int:
    stdout = Console(file=sys.stdout, force_terminal=False)
    stderr = Console(file=sys.stderr, force_terminal=False)

    if settings.output == "json":
        payload = result.model_dump(by_alias=True, mode="json")
        sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
        return 0

    if not result.ok:
        if result.error is not None:
            title = _error_title(result.error.type)
            stderr.print(Text(f"{title}: {result.error.message}"))
            _render_error_details(
                stderr=stderr,
                command=result.command,
                error_type=result.error.type,
                hint=result.error.hint,
                details=result.error.details,
                settings=settings,
            )
        else:
            stderr.print("Error")
        return 0

    # Queries go out unwrapped so they can be piped.
    if result.command == "build" and isinstance(result.data, dict):
        sys.stdout.write(str(result.data.get("query", "")) + "\n")
        return 0

    renderable: Any
    if result.command == "version" and isinstance(result.data, dict):
        renderable = Text(result.data.get("version", ""), style="bold")
    elif result.command == "config path" and isinstance(result.data, dict):
        renderable = Text(str(result.data.get("path", "")))
    elif result.command == "config init" and isinstance(result.data, dict):
        renderable = Panel.fit(Text(f"Initialized config at {result.data.get('path', '')}"))
    else:
        renderable = _render_human_data(result.data)

    stdout.print(renderable)
    return 0
