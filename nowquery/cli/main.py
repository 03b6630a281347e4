from __future__ import annotations

from pathlib import Path

import click
import rich_click

import nowquery

from .context import CLIContext
from .logging import configure_logging, restore_logging


@click.group(
    name="nowquery",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=rich_click.RichGroup,
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $NOWQUERY_CONFIG or the user config directory).",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None)
@click.option("--no-log-file", is_flag=True, help="Disable file logging explicitly.")
@click.version_option(version=nowquery.__version__, prog_name="nowquery")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    config_file: str | None,
    log_file: str | None,
    no_log_file: bool,
) -> None:
    """Build encoded queries (sysparm_query) for ServiceNow-style table APIs."""
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    effective_log_file = Path(log_file) if log_file else None
    enable_log_file = effective_log_file is not None and not no_log_file

    click_ctx.obj = CLIContext(
        output="json" if json_flag else output,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        config_file=config_file,
        log_file=effective_log_file,
        enable_log_file=enable_log_file,
    )

    previous_logging = configure_logging(
        verbosity=verbose,
        log_file=effective_log_file,
        enable_file=enable_log_file,
    )
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


def main() -> None:
    cli(prog_name="nowquery")


# Register commands
from .commands.build_cmd import build_cmd as _build_cmd  # noqa: E402
from .commands.config_cmds import config_group as _config_group  # noqa: E402
from .commands.operators_cmd import operators_cmd as _operators_cmd  # noqa: E402
from .commands.version_cmd import version_cmd as _version_cmd  # noqa: E402

cli.add_command(_build_cmd)
cli.add_command(_operators_cmd)
cli.add_command(_config_group)
cli.add_command(_version_cmd)
