"""Shared pytest fixtures and test helpers for gardenctl tests."""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from gardenctl.config.settings import GardenSettings
from gardenctl.infrastructure.shell import CompletedCommand
from gardenctl.infrastructure.workspace import Workspace

SAMPLE_CONFIG = """\
garden:
  root: ${GARDEN_CONFIG_DIR}/src
variables:
  profile: debug
  greeting: hello from ${profile}
commands:
  build: echo building ${TREE_NAME}
  test:
    - echo one
    - echo two
trees:
  alpha:
    description: The first tree
    variables:
      flavor: vanilla
  beta:
    commands:
      build: make ${profile}
  gamma:
    path: gamma-dir
groups:
  backend: [alpha, beta]
gardens:
  work:
    trees: [alpha, gamma]
    variables:
      profile: release
"""


@dataclass
class Call:
    """One ``run`` invocation recorded by :class:`FakeRunner`."""

    argv: list[str]
    cwd: Path
    env: dict[str, str]

    @property
    def script(self) -> str:
        return self.argv[2] if len(self.argv) > 2 else ""


@dataclass
class FakeRunner:
    """ShellRunner double: records every call and never spawns a process.

    ``capture`` answers from :attr:`responses` (default: exit 0, no output).
    ``run`` exits with the status registered for the tree directory name
    or the script text, and raises KeyboardInterrupt for directories listed
    in :attr:`interrupt`.
    """

    responses: dict[str, CompletedCommand] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    interrupt: set[str] = field(default_factory=set)
    captured: list[str] = field(default_factory=list)
    calls: list[Call] = field(default_factory=list)

    def respond(
        self, command: str, stdout: str = "", *, exit_code: int = 0, stderr: str = ""
    ) -> None:
        self.responses[command] = CompletedCommand(exit_code, stdout, stderr)

    def capture(
        self,
        command: str,
        *,
        shell: str,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CompletedCommand:
        self.captured.append(command)
        return self.responses.get(command, CompletedCommand(0))

    def run(self, argv: Sequence[str], *, cwd: Path, env: Mapping[str, str]) -> int:
        call = Call(list(argv), Path(cwd), dict(env))
        self.calls.append(call)
        if call.cwd.name in self.interrupt:
            raise KeyboardInterrupt
        if call.script in self.statuses:
            return self.statuses[call.script]
        return self.statuses.get(call.cwd.name, 0)

    @property
    def trees_run(self) -> list[str]:
        return [call.cwd.name for call in self.calls]


@pytest.fixture(autouse=True)
def _clean_garden_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GARDEN_* variables from the developer's shell out of settings."""
    for name in (
        "GARDEN_CONFIG",
        "GARDEN_CONFIG_DIR",
        "GARDEN_ROOT",
        "GARDEN_SHELL",
        "GARDEN_KEEP_GOING",
        "GARDEN_STRICT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Write ``garden.yaml`` into tmp_path and return its path."""

    def write(text: str, name: str = "garden.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text))
        return path

    return write


@pytest.fixture
def garden_root(tmp_path: Path, write_config: Callable[[str], Path]) -> Path:
    """tmp_path holding SAMPLE_CONFIG with every tree directory created."""
    write_config(SAMPLE_CONFIG)
    for name in ("alpha", "beta", "gamma-dir"):
        (tmp_path / "src" / name).mkdir(parents=True)
    return tmp_path


@pytest.fixture
def make_workspace(tmp_path: Path, fake_runner: FakeRunner) -> Callable[..., Workspace]:
    """Build a Workspace over ``tmp_path/garden.yaml`` with a FakeRunner."""

    def make(
        *,
        runner: Any = None,
        environ: Mapping[str, str] | None = None,
        config_name: str = "garden.yaml",
        **overrides: Any,
    ) -> Workspace:
        overrides.setdefault("cwd", tmp_path)
        settings = GardenSettings(config_path=tmp_path / config_name, **overrides)
        env = {"PATH": "/usr/bin", "HOME": str(tmp_path)} if environ is None else environ
        return Workspace(settings, runner=runner or fake_runner, environ=env)

    return make


@pytest.fixture
def workspace(garden_root: Path, make_workspace: Callable[..., Workspace]) -> Workspace:
    """Workspace over SAMPLE_CONFIG."""
    return make_workspace()


@pytest.fixture
def invoke(
    garden_root: Path,
    cli_runner: CliRunner,
    fake_runner: FakeRunner,
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., Any]:
    """Invoke the CLI against SAMPLE_CONFIG with dispatch going to the FakeRunner."""
    from gardenctl.cli import cli

    monkeypatch.setattr(
        "gardenctl.infrastructure.workspace.SubprocessRunner", lambda: fake_runner
    )

    def run(*args: str, cwd: Path | None = None) -> Any:
        argv = ["-c", str(garden_root / "garden.yaml")]
        if cwd is not None:
            argv += ["-C", str(cwd)]
        return cli_runner.invoke(cli, [*argv, *args])

    return run
