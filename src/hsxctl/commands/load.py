"""Command: load a document and run its <hsx> block."""

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
  hsxctl load page.html
  hsxctl load https://example.com/app.html
  hsxctl load page.html --output rendered.html
  hsxctl -q load page.html > rendered.html""",
)
@click.argument("url")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the resulting HTML here instead of printing it.",
)
@click.pass_obj
def load(app: AppContext, url: str, output: Path | None) -> None:
    """Run a document's <hsx> block against a fresh headless page."""
    from hsxctl.services.loader import LoadService

    app.emit(LoadService(app.settings, app.plugins).load(url, output=output))
