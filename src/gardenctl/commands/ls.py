"""Command: list the trees a query selects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gardenctl.commands._base import GardenCommand

if TYPE_CHECKING:
    from gardenctl.commands._context import AppContext


@click.command(
    cls=GardenCommand,
    examples="""\
  gardenctl ls
  gardenctl ls %backend
  gardenctl ls ':work !legacy*'
  gardenctl ls --variables @app""",
)
@click.option("--variables", is_flag=True, help="Resolve every variable in each tree's scope.")
@click.argument("queries", nargs=-1)
@click.pass_obj
def ls(app: AppContext, variables: bool, queries: tuple[str, ...]) -> None:
    """List the trees selected by QUERIES (default: all trees)."""
    from gardenctl.services.inspect import InspectService

    query = " ".join(queries) if queries else "*"
    app.emit(InspectService(app.workspace).list_trees(query, variables=variables))
