"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from gardenctl.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["gardenctl ls", "gardenctl build @app -- --jobs 4"]),
    (["cmd", "--examples"], ["gardenctl cmd %backend build test", "-k -b"]),
    (["exec", "--examples"], ["git status --short"]),
    (["eval", "--examples"], ["${TREE_PATH}/build"]),
    (["ls", "--examples"], ["--variables @app"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples") or "root"


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesInHelp:
    @pytest.mark.parametrize("args", [["cmd", "--help"], ["exec", "--help"], ["ls", "--help"]])
    def test_examples_in_help(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "--examples" in result.output


class TestExamplesEagerExit:
    def test_examples_skips_required_args(self, cli_runner: CliRunner) -> None:
        # cmd requires QUERY and COMMANDS
        result = cli_runner.invoke(cli, ["cmd", "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output
