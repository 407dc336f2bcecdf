"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy ExecutionContext initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from zonectl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from zonectl.config.settings import ZoneSettings
    from zonectl.infrastructure.context import ExecutionContext
    from zonectl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The execution context is built on first use, so ``--help`` and
    ``--version`` never trigger plugin discovery.
    """

    def __init__(self, settings: ZoneSettings) -> None:
        self.settings = settings
        self._context: ExecutionContext | None = None

        from zonectl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from zonectl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def context(self) -> ExecutionContext:
        """The execution context (created lazily on first access)."""
        if self._context is None:
            from zonectl.infrastructure.context import ExecutionContext
            from zonectl.infrastructure.registries.builders import (
                REGISTRY_BUILDERS,
                load_registry_builders,
            )

            builders = REGISTRY_BUILDERS
            if self.settings.plugins.enabled:
                from zonectl.plugins.manager import PluginManager

                pm = PluginManager()
                pm.discover_and_load(local_dir=self.settings.plugins.local_dir)
                builders = load_registry_builders(pm)

            self._context = ExecutionContext.from_settings(self.settings, builders=builders)
        return self._context

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
