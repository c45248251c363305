"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Workspace initialization and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from gardenctl.domain.errors import GardenError
from gardenctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from gardenctl.config.settings import GardenSettings
    from gardenctl.domain.model import TreeContext
    from gardenctl.infrastructure.workspace import Workspace
    from gardenctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The workspace is lazily
    loaded on first use so ``--help`` and ``--version`` never read the
    configuration file.
    """

    def __init__(self, settings: GardenSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None

        from gardenctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def workspace(self) -> Workspace:
        """The workspace (loaded lazily on first access).

        A configuration that cannot be loaded is reported like any other
        failed result and ends the process.
        """
        if self._workspace is None:
            from gardenctl.infrastructure.workspace import Workspace
            from gardenctl.services.result import ServiceResult

            try:
                self._workspace = Workspace(self.settings)
            except GardenError as exc:
                self.emit(ServiceResult.failure("config", exc))
                raise
        return self._workspace

    def keep_going(self, flag: bool) -> bool:
        return flag or self.settings.keep_going

    def tree_header(self, context: TreeContext, path: Path, exists: bool) -> None:
        """Announce a tree on stderr before its commands run."""
        if self.settings.quiet or self.settings.json_output:
            return
        name = context.tree if context.garden is None else f"{context.garden}:{context.tree}"
        header = click.style(f"# {name}", fg="cyan", bold=True)
        location = click.style(f"  {path}", fg="blue")
        suffix = "" if exists else click.style("  (skipped)", fg="yellow")
        click.echo(f"{header}{location}{suffix}", err=True)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with ``result.exit_code``.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(result.exit_code)
