"""Command: print the parsed command sequence of a source."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from hsxctl.commands._base import HsxCommand

if TYPE_CHECKING:
    from hsxctl.commands._context import AppContext


@click.command(
    cls=HsxCommand,
    examples="""\
  hsxctl parse Mist.hsx
  hsxctl parse block.hsx --runtime
  hsxctl --json parse Mist.hsx""",
)
@click.argument("source", type=click.Path(path_type=Path))
@click.option("--runtime", is_flag=True, help="Use the runtime grammar.")
@click.pass_obj
def parse(app: AppContext, source: Path, runtime: bool) -> None:
    """Parse an HSX source without executing it."""
    from hsxctl.domain.types import Grammar
    from hsxctl.services.parse import ParseService

    grammar = Grammar.RUNTIME if runtime else Grammar.BUILD
    app.emit(ParseService(app.settings, app.plugins).parse(source, grammar=grammar))
