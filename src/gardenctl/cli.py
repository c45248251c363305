"""Root CLI group for gardenctl with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from gardenctl import __version__
from gardenctl.commands import register_commands
from gardenctl.commands._base import GardenCli
from gardenctl.commands._context import AppContext
from gardenctl.config.settings import GardenSettings


def _parse_defines(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Turn repeated ``-D name=value`` options into a mapping (last one wins)."""
    defines: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            msg = f"expected name=value, got {item!r}"
            raise click.BadParameter(msg)
        defines[name.strip()] = value
    return defines


@click.group(
    cls=GardenCli,
    invoke_without_command=True,
    examples="""\
  gardenctl ls
  gardenctl cmd %backend build test
  gardenctl -D profile=release cmd '* !docs' build
  gardenctl build @app -- --jobs 4
  gardenctl --config ~/src/garden.yaml eval '${GARDEN_ROOT}'""",
)
@click.version_option(version=__version__, prog_name="gardenctl")
@click.option("-c", "--config", "config_path", default=None, help="Use this config file.")
@click.option(
    "-C",
    "--chdir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in DIR (config discovery and the '.' selector).",
)
@click.option("--root", default=None, help="Override garden.root (GARDEN_ROOT).")
@click.option(
    "-D",
    "--define",
    "defines",
    multiple=True,
    callback=_parse_defines,
    metavar="NAME=VALUE",
    help="Override a variable in every scope. Repeatable.",
)
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--strict", is_flag=True, help="Fail when a query term matches nothing.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    chdir: Path | None,
    root: str | None,
    defines: dict[str, str],
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    strict: bool,
) -> None:
    """gardenctl — run commands across a garden of trees."""
    ctx.ensure_object(dict)
    settings = GardenSettings.from_cli(
        config_path=config_path,
        cwd=chdir.resolve() if chdir is not None else None,
        root=root,
        defines=defines,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        strict=strict,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
