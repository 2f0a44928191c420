"""Subcommand modules for hsxctl.

register_commands() imports each module on registration; the services
behind them are imported inside the command bodies so ``--help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from hsxctl.commands.build import build
    from hsxctl.commands.load import load
    from hsxctl.commands.parse import parse

    cli.add_command(build)
    cli.add_command(load)
    cli.add_command(parse)
