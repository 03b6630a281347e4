from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
import rich_click

from nowquery.builder import format_value
from nowquery.query import build_query, query_params

from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options
from ..runner import CommandOutput, run_command


def _parse_json_option(raw: str, *, option: str) -> Any:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CLIError(
            f"{option} is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            hint='Clauses are JSON arrays, e.g. [["state", "-eq", "1"], "or", ["priority", "-le", "2"]]',
        ) from exc
    return _coerce_json_clauses(parsed, option=option)


def _coerce_json_clauses(value: Any, *, option: str) -> Any:
    """Render JSON scalars the way the fluent builder does; reject null and objects."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return [_coerce_json_clauses(item, option=option) for item in value]
    if value is None:
        raise CLIError(
            f"{option} contains null, which is not a valid query value.",
            hint='Use the "-isempty" or "-isnotempty" operator to match empty fields.',
        )
    if isinstance(value, dict):
        raise CLIError(f"{option} contains a JSON object; clauses must be arrays or strings.")
    return format_value(value)


def _read_filter_file(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"Cannot read filter file {path}: {exc.strerror or exc}") from exc


def _parse_pairs(values: tuple[str, ...], *, option: str) -> list[tuple[str, str]] | None:
    if not values:
        return None
    pairs: list[tuple[str, str]] = []
    for raw in values:
        field, sep, value = raw.partition("=")
        if not sep or not field.strip():
            raise CLIError(f"{option} expects FIELD=VALUE, got {raw!r}")
        pairs.append((field.strip(), value))
    return pairs


@click.command(name="build", cls=rich_click.RichCommand)
@click.option(
    "--filter",
    "filter_json",
    type=str,
    default=None,
    help='Advanced filter clauses as JSON, e.g. \'[["state","-eq","1"],"or",["priority","-le","2"]]\'.',
)
@click.option(
    "--filter-file",
    type=click.Path(dir_okay=False, allow_dash=True),
    default=None,
    help="Read advanced filter clauses from a JSON file ('-' for stdin).",
)
@click.option(
    "--sort",
    "sort_json",
    type=str,
    default=None,
    help='Advanced sort clauses as JSON, e.g. \'[["opened_at","desc"],["number"]]\'.',
)
@click.option("--order-by", type=str, default=None, help="Basic mode sort field (default: opened_at).")
@click.option(
    "--order-direction",
    type=click.Choice(["Asc", "Desc"], case_sensitive=False),
    default=None,
    help="Basic mode sort direction (default: Desc).",
)
@click.option(
    "--match-exact",
    multiple=True,
    metavar="FIELD=VALUE",
    help="Basic mode exact match (repeatable).",
)
@click.option(
    "--match-contains",
    multiple=True,
    metavar="FIELD=VALUE",
    help="Basic mode substring match (repeatable).",
)
@output_options
@click.pass_obj
def build_cmd(
    ctx: CLIContext,
    *,
    filter_json: str | None,
    filter_file: str | None,
    sort_json: str | None,
    order_by: str | None,
    order_direction: str | None,
    match_exact: tuple[str, ...],
    match_contains: tuple[str, ...],
) -> None:
    """Build an encoded query.

    Advanced mode (--filter/--filter-file/--sort) and basic mode
    (--order-by/--order-direction/--match-exact/--match-contains) cannot be mixed.
    """

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        if filter_json is not None and filter_file is not None:
            raise CLIError("Use only one of --filter and --filter-file.")

        filter_clauses: Any = None
        if filter_json is not None:
            filter_clauses = _parse_json_option(filter_json, option="--filter")
        elif filter_file is not None:
            filter_clauses = _parse_json_option(
                _read_filter_file(filter_file), option="--filter-file"
            )

        sort_clauses: Any = None
        if sort_json is not None:
            sort_clauses = _parse_json_option(sort_json, option="--sort")
        elif filter_clauses is not None:
            raise CLIError(
                "Advanced mode requires --sort.",
                hint='Pass --sort \'[["opened_at","desc"]]\' (or --sort \'[]\' for no ordering).',
            )

        advanced = filter_clauses is not None or sort_clauses is not None
        query = build_query(
            filter=filter_clauses,
            sort=sort_clauses,
            order_by=order_by,
            order_direction=order_direction,
            match_exact=_parse_pairs(match_exact, option="--match-exact"),
            match_contains=_parse_pairs(match_contains, option="--match-contains"),
            # Basic mode never consults the operator table.
            operators=ctx.operators() if advanced else None,
        )
        mode = "advanced" if advanced else "basic"
        return CommandOutput(data={"query": query, "mode": mode, "params": query_params(query)})

    run_command(ctx, command="build", fn=fn)
