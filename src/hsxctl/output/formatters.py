"""Rich/JSON output helpers.

The CLI renders a ServiceResult for humans (Rich) or machines
(``--json``).  This layer picks the mode; :mod:`.renderers` does the
human rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hsxctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from hsxctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output switches taken from the global CLI flags."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    JSON wins over ``--quiet``, which wins over the Rich rendering.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
