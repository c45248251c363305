"""Tests for custom commands run as ``gardenctl <name>``."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conftest import FakeRunner


class TestCustomCommand:
    def test_defaults_to_current_tree(
        self, invoke: Callable[..., Any], fake_runner: FakeRunner, garden_root: Path
    ) -> None:
        result = invoke("build", cwd=garden_root / "src" / "beta")
        assert result.exit_code == 0, result.output
        assert fake_runner.trees_run == ["beta"]
        assert fake_runner.calls[0].script == "make debug"

    def test_current_tree_from_subdirectory(
        self, invoke: Callable[..., Any], fake_runner: FakeRunner, garden_root: Path
    ) -> None:
        nested = garden_root / "src" / "gamma-dir" / "lib"
        nested.mkdir()
        invoke("build", cwd=nested)
        assert fake_runner.trees_run == ["gamma-dir"]

    def test_with_queries(self, invoke: Callable[..., Any], fake_runner: FakeRunner) -> None:
        result = invoke("test", "beta", "%backend")
        assert result.exit_code == 0, result.output
        assert [(c.cwd.name, c.script) for c in fake_runner.calls] == [
            ("alpha", "echo one"),
            ("alpha", "echo two"),
            ("beta", "echo one"),
            ("beta", "echo two"),
        ]

    def test_passthrough(self, invoke: Callable[..., Any], fake_runner: FakeRunner) -> None:
        invoke("build", "alpha", "--", "--release")
        assert fake_runner.calls[0].argv[-1] == "--release"

    def test_unknown_command_is_skipped(
        self, invoke: Callable[..., Any], fake_runner: FakeRunner
    ) -> None:
        result = invoke("deploy", "*")
        assert result.exit_code == 0
        assert fake_runner.calls == []
        assert "No selected tree defines: deploy" in result.stderr

    def test_help(self, invoke: Callable[..., Any]) -> None:
        result = invoke("build", "--help")
        assert result.exit_code == 0
        assert "Run the 'build' command" in result.output
