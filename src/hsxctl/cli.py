"""Root CLI group for hsxctl with global flags and command registration."""

from __future__ import annotations

import click

from hsxctl import __version__
from hsxctl.commands import register_commands
from hsxctl.commands._base import HsxGroup
from hsxctl.commands._context import AppContext
from hsxctl.config.settings import HsxSettings


@click.group(
    cls=HsxGroup,
    invoke_without_command=True,
    examples="""\
  hsxctl build
  hsxctl -v build Mist.hsx --emit-html out.html
  hsxctl load page.html
  hsxctl --json parse Mist.hsx""",
)
@click.version_option(version=__version__, prog_name="hsxctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """hsxctl — build and run HSX command scripts."""
    ctx.ensure_object(dict)
    settings = HsxSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
