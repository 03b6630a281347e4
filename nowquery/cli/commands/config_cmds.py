from __future__ import annotations

import click
import rich_click

from nowquery.config import config_init_template

from ..context import CLIContext
from ..errors import CLIError
from ..options import output_options
from ..runner import CommandOutput, run_command


@click.group(name="config", cls=rich_click.RichGroup)
def config_group() -> None:
    """Configuration file."""


@config_group.command(name="path", cls=rich_click.RichCommand)
@output_options
@click.pass_obj
def config_path(ctx: CLIContext) -> None:
    """Show the path to the configuration file."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        path = ctx.config_path
        return CommandOutput(data={"path": str(path), "exists": path.exists()})

    run_command(ctx, command="config path", fn=fn)


@config_group.command(name="init", cls=rich_click.RichCommand)
@click.option("--force", is_flag=True, help="Overwrite existing config file.")
@output_options
@click.pass_obj
def config_init(ctx: CLIContext, *, force: bool) -> None:
    """Create a new configuration file with template."""

    def fn(ctx: CLIContext, _warnings: list[str]) -> CommandOutput:
        path = ctx.config_path
        path.parent.mkdir(parents=True, exist_ok=True)
        overwritten = False
        if path.exists():
            if not force:
                raise CLIError(
                    f"Config already exists: {path} (use --force to overwrite)",
                    error_type="file_exists",
                )
            overwritten = True

        path.write_text(config_init_template(), encoding="utf-8")
        return CommandOutput(data={"path": str(path), "created": True, "overwritten": overwritten})

    run_command(ctx, command="config init", fn=fn)
