"""Command: evaluate an expression in the global or a tree's scope."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gardenctl.commands._base import GardenCommand

if TYPE_CHECKING:
    from gardenctl.commands._context import AppContext


@click.command(
    "eval",
    cls=GardenCommand,
    examples="""\
  gardenctl eval '${GARDEN_ROOT}'
  gardenctl eval '${TREE_PATH}/build' app
  gardenctl eval '$ git -C ${TREE_PATH} rev-parse HEAD' app work""",
)
@click.argument("expression")
@click.argument("tree", required=False)
@click.argument("garden", required=False)
@click.pass_obj
def eval_cmd(app: AppContext, expression: str, tree: str | None, garden: str | None) -> None:
    """Evaluate EXPRESSION, optionally in TREE's scope seen through GARDEN."""
    from gardenctl.services.inspect import InspectService

    app.emit(InspectService(app.workspace).evaluate(expression, tree, garden))
