"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``.  Builds the plugin manager lazily and routes
ServiceResults to stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from hsxctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from hsxctl.config.settings import HsxSettings
    from hsxctl.plugins.manager import PluginManager
    from hsxctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Plugins are discovered on first use so ``--help`` and ``--version``
    never import third-party plugin code.
    """

    def __init__(self, settings: HsxSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from hsxctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

        if settings.verbose:
            from hsxctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager with built-ins, entry points and local plugins loaded."""
        if self._plugins is None:
            from hsxctl.plugins.manager import PluginManager

            self._plugins = PluginManager()
            if self.settings.plugins.enabled:
                self._plugins.discover_and_load(local_dir=self.settings.plugin_dir)
        return self._plugins

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr so piped output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output and not settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
