"""structlog configuration for hsxctl.

stdlib loggers (``logging.getLogger(__name__)``) and structlog loggers
share one processor chain and one stderr handler.  Two renderers:

- console (default): key=value lines, colored on a TTY
- JSON (``--log-json``): one object per line
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers that are noisy at DEBUG.
_QUIET_LIBRARIES = ("urllib3", "requests", "pluggy")


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Level for the ``hsxctl`` logger.  ``--verbose`` beats ``--quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Route all hsxctl logging to stderr through structlog.

    Args:
        verbose: DEBUG for hsxctl loggers (executor events included).
        quiet: ERROR only, so diagnostics do not interleave with output.
        log_json: JSON renderer instead of the console renderer.
    """
    shared = _shared_processors()

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("hsxctl").setLevel(resolve_level(verbose=verbose, quiet=quiet))
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
