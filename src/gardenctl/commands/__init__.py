"""Subcommand modules for gardenctl.

Provides register_commands() which uses deferred imports to keep
``gardenctl --help`` fast. Custom commands from the configuration are not
registered here; :class:`~gardenctl.commands._base.GardenCli` builds them
on demand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the built-in commands on the root CLI group."""
    from gardenctl.commands.cmd import cmd
    from gardenctl.commands.eval_cmd import eval_cmd
    from gardenctl.commands.exec_cmd import exec_cmd
    from gardenctl.commands.ls import ls

    cli.add_command(cmd)
    cli.add_command(exec_cmd)
    cli.add_command(eval_cmd)
    cli.add_command(ls)
