"""Command: run an arbitrary program inside each selected tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gardenctl.commands._base import GardenCommand

if TYPE_CHECKING:
    from gardenctl.commands._context import AppContext


@click.command(
    "exec",
    cls=GardenCommand,
    examples="""\
  gardenctl exec '*' -- git status --short
  gardenctl exec -k %backend -- make check""",
)
@click.option("-k", "--keep-going", is_flag=True, help="Continue after a tree fails.")
@click.argument("query")
@click.argument("argv", nargs=-1, required=True)
@click.pass_obj
def exec_cmd(app: AppContext, keep_going: bool, query: str, argv: tuple[str, ...]) -> None:
    """Run ARGV in every tree selected by QUERY, with the tree's environment.

    Put ``--`` before ARGV when it contains options.
    """
    from gardenctl.services.dispatch import CommandService

    svc = CommandService(app.workspace, on_tree=app.tree_header)
    app.emit(svc.exec_in_trees(query, list(argv), keep_going=app.keep_going(keep_going)))
