from __future__ import annotations

import click
import rich_click

from ..context import CLIContext
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.command(name="operators", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def operators_cmd(ctx: CLIContext) -> None:
    """List the operators usable in advanced filter clauses."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        rows = [
            {
                "name": op.name,
                "queryOperator": op.query_operator,
                "requiresValue": op.requires_value,
                "description": op.description,
            }
            for op in ctx.operators().values()
        ]
        return CommandOutput(data=rows)

    run_command(ctx, command="operators", fn=fn)
