"""Tests for the root gardenctl CLI."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from gardenctl import __version__
from gardenctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "gardenctl" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize(
    "flag",
    ["--json", "-q", "-v", "--log-json", "--strict", "--root=/tmp", "-D", "-c"],
)
def test_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    args = {"-D": ["-D", "a=b"], "-c": ["-c", "/tmp/garden.yaml"]}.get(flag, [flag])
    result = cli_runner.invoke(cli, [*args, "--version"])
    assert result.exit_code == 0


def test_define_requires_equals(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-D", "novalue", "ls"])
    assert result.exit_code == 2
    assert "name=value" in result.output


def test_chdir_must_exist(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["-C", str(tmp_path / "absent"), "ls"])
    assert result.exit_code == 2


def test_chdir_discovers_config(cli_runner: CliRunner, garden_root: Path) -> None:
    result = cli_runner.invoke(cli, ["-C", str(garden_root), "-q", "ls"])
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["alpha", "beta", "gamma"]


def test_root_override(cli_runner: CliRunner, garden_root: Path) -> None:
    config = str(garden_root / "garden.yaml")
    args = ["-c", config, "--root", "/srv", "eval", "${TREE_PATH}", "beta"]
    result = cli_runner.invoke(cli, args)
    assert result.stdout.strip() == "/srv/beta"


# --- Registered commands ---


@pytest.mark.parametrize("name", ["cmd", "exec", "eval", "ls"])
def test_commands_registered(cli_runner: CliRunner, name: str) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert name in result.output
