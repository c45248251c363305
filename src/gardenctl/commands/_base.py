"""Custom Click base classes.

``GardenCommand`` and ``GardenGroup`` accept an ``examples`` parameter:
when ``--examples`` is passed, the command prints usage examples and exits.
``PassthroughCommand`` splits its arguments at the first ``--`` so the
tail reaches the dispatched commands untouched. ``GardenCli`` is the root
group; a name that is not a built-in subcommand runs the custom command of
that name from the configuration.
"""

from __future__ import annotations

from typing import Any

import click

PASSTHROUGH_KEY = "gardenctl.passthrough"


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class GardenCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class PassthroughCommand(GardenCommand):
    """Command whose arguments after ``--`` are kept aside verbatim.

    Read them back with :func:`passthrough_args`.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if "--" in args:
            idx = args.index("--")
            ctx.meta[PASSTHROUGH_KEY] = tuple(args[idx + 1 :])
            args = args[:idx]
        else:
            ctx.meta[PASSTHROUGH_KEY] = ()
        return super().parse_args(ctx, args)


def passthrough_args(ctx: click.Context) -> tuple[str, ...]:
    """Arguments that followed ``--`` on the command line."""
    return tuple(ctx.meta.get(PASSTHROUGH_KEY, ()))


class GardenGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = GardenCommand`` so all subcommands automatically
    accept the ``examples`` parameter without explicit ``cls=`` each time.
    """

    command_class = GardenCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class GardenCli(GardenGroup):
    """Root group: unknown subcommand names become custom commands."""

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is not None or cmd_name.startswith("-"):
            return command
        from gardenctl.commands.custom import make_custom_command

        return make_custom_command(cmd_name)
