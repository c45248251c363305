"""Custom commands: ``gardenctl <name> [query...]``.

Any subcommand name the CLI does not know is looked up in the
configuration's ``commands`` sections and run over the selected trees.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gardenctl.commands._base import PassthroughCommand, passthrough_args

if TYPE_CHECKING:
    from gardenctl.commands._context import AppContext


def make_custom_command(name: str) -> click.Command:
    """Build a Click command that runs the configured command *name*."""

    @click.command(
        name=name,
        cls=PassthroughCommand,
        help=f"Run the '{name}' command in the selected trees (default: the current tree).",
    )
    @click.option("-k", "--keep-going", is_flag=True, help="Continue after a tree fails.")
    @click.argument("queries", nargs=-1)
    @click.pass_obj
    def custom(app: AppContext, keep_going: bool, queries: tuple[str, ...]) -> None:
        from gardenctl.services.dispatch import CommandService

        svc = CommandService(app.workspace, on_tree=app.tree_header)
        app.emit(
            svc.run_custom(
                name,
                list(queries),
                passthrough_args(click.get_current_context()),
                keep_going=app.keep_going(keep_going),
            )
        )

    return custom
