"""Command: run the build pass over an HSX source."""

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
  hsxctl build
  hsxctl build app/Mist.hsx
  hsxctl build Mist.hsx --base-dir ./src
  hsxctl build Mist.hsx --emit-html dist/index.html
  hsxctl --json build""",
)
@click.argument("source", required=False, type=click.Path(path_type=Path))
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Resolve relative paths from here (default: the source's directory).",
)
@click.option(
    "--emit-html",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the rendered headless document to this file.",
)
@click.pass_obj
def build(
    app: AppContext,
    source: Path | None,
    base_dir: Path | None,
    emit_html: Path | None,
) -> None:
    """Execute an HSX source with the build grammar."""
    from hsxctl.services.build import BuildService

    svc = BuildService(app.settings, app.plugins)
    app.emit(svc.build(source, base_dir=base_dir, emit_html=emit_html))
