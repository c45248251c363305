"""Command: run named commands across the trees a query selects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gardenctl.commands._base import PassthroughCommand, passthrough_args

if TYPE_CHECKING:
    from gardenctl.commands._context import AppContext


@click.command(
    cls=PassthroughCommand,
    examples="""\
  gardenctl cmd @app build
  gardenctl cmd %backend build test
  gardenctl cmd -k -b '* !docs' fetch status
  gardenctl cmd :work test -- --verbose""",
)
@click.option("-k", "--keep-going", is_flag=True, help="Continue after a tree fails.")
@click.option(
    "-b",
    "--breadth-first",
    is_flag=True,
    help="Run each command across all trees before the next command.",
)
@click.argument("query")
@click.argument("commands", nargs=-1, required=True)
@click.pass_obj
def cmd(
    app: AppContext,
    keep_going: bool,
    breadth_first: bool,
    query: str,
    commands: tuple[str, ...],
) -> None:
    """Run COMMANDS in every tree selected by QUERY.

    Arguments after ``--`` are passed to each command as $1, $2, ...
    """
    from gardenctl.services.dispatch import CommandService

    svc = CommandService(app.workspace, on_tree=app.tree_header)
    app.emit(
        svc.run_commands(
            query,
            list(commands),
            passthrough_args(click.get_current_context()),
            keep_going=app.keep_going(keep_going),
            breadth_first=breadth_first,
        )
    )
